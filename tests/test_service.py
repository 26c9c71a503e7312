"""
Tests for WalletService: uniqueness, referential integrity, sync and cascade delete.
"""

from __future__ import annotations

import random
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone

import pytest

from backend_wallettracker.core.exceptions import ConflictError, InvalidInputError, NotFoundError
from backend_wallettracker.database import WALLET_PROVIDERS, Transaction
from backend_wallettracker.services import WalletService

NEW_ADDRESS = "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa"
FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_list_wallets_returns_seeded(service):
    wallets = service.list_wallets()
    assert [w.name for w in wallets] == ["Coinbase", "Kraken", "Phantom"]


def test_list_transactions_filters_by_wallet(service):
    kraken = service.list_wallets()[1]
    txs = service.list_transactions(kraken.id)
    assert len(txs) == 5
    assert all(t.wallet_id == kraken.id for t in txs)


def test_list_transactions_unknown_wallet(service):
    with pytest.raises(NotFoundError, match="Wallet not found"):
        service.list_transactions("missing")


def test_create_wallet_appends_and_returns_all(service):
    wallets = service.create_wallet(NEW_ADDRESS)
    assert len(wallets) == 4
    new = wallets[-1]
    assert new.address == NEW_ADDRESS
    assert new.name in WALLET_PROVIDERS
    assert new.icon_url == ""
    assert service.list_transactions(new.id) == []
    assert service.list_wallets() == wallets


def test_create_wallet_stores_address_as_given(service):
    padded = f" {NEW_ADDRESS} "
    wallets = service.create_wallet(padded)
    assert wallets[-1].address == padded
    # Uniqueness compares the stored form
    assert service.create_wallet(NEW_ADDRESS)[-1].address == NEW_ADDRESS


def test_create_wallet_duplicate(service):
    service.create_wallet(NEW_ADDRESS)
    with pytest.raises(ConflictError, match="already exists"):
        service.create_wallet(NEW_ADDRESS)
    assert len(service.list_wallets()) == 4


@pytest.mark.parametrize("address", [None, "", "   "])
def test_create_wallet_requires_address(service, address):
    with pytest.raises(InvalidInputError, match="Address is required"):
        service.create_wallet(address)
    assert len(service.list_wallets()) == 3


def test_sync_wallet_appends_new_transactions(seeded_store):
    service = WalletService(seeded_store, rng=random.Random(5), clock=lambda: FIXED_NOW)
    wallet = service.list_wallets()[0]
    before = service.list_transactions(wallet.id)
    new = service.sync_wallet(wallet.id)
    assert 1 <= len(new) <= 3
    after = service.list_transactions(wallet.id)
    assert after == before + new
    for tx in new:
        assert tx.wallet_id == wallet.id
        assert 1 <= tx.confirmations <= 6
        assert 0.01 <= abs(tx.balance) <= 2.5
        assert round(tx.balance, 8) == tx.balance
        date = datetime.fromisoformat(tx.date)
        assert FIXED_NOW - timedelta(days=3, seconds=1) <= date <= FIXED_NOW


def test_sync_wallet_caps_sends_by_balance(seeded_store):
    """With a net balance of 0.5 no single send exceeds 0.5."""
    seeded_store.write_wallets(seeded_store.read_wallets()[:1])
    wallet = seeded_store.read_wallets()[0]
    seeded_store.write_transactions(
        [Transaction(id="t0", wallet_id=wallet.id, date=FIXED_NOW.isoformat(), balance=0.5, confirmations=1)]
    )
    service = WalletService(seeded_store, rng=random.Random(2), clock=lambda: FIXED_NOW)
    sends = []
    for _ in range(20):
        new = service.sync_wallet(wallet.id)
        sends.extend(t.balance for t in new if t.balance < 0)
        # Restore the starting balance so the cap stays at 0.5
        seeded_store.write_transactions(
            [Transaction(id="t0", wallet_id=wallet.id, date=FIXED_NOW.isoformat(), balance=0.5, confirmations=1)]
        )
    assert sends
    assert all(-0.5 <= s <= -0.01 for s in sends)


def test_sync_wallet_unknown_wallet_writes_nothing(service):
    before = service.store.transactions_path.read_bytes()
    with pytest.raises(NotFoundError):
        service.sync_wallet("missing")
    assert service.store.transactions_path.read_bytes() == before


def test_delete_wallet_cascades(service):
    wallets = service.list_wallets()
    target = wallets[2]
    other_counts = {w.id: len(service.list_transactions(w.id)) for w in wallets[:2]}
    service.delete_wallet(target.id)
    remaining = service.list_wallets()
    assert [w.id for w in remaining] == [w.id for w in wallets[:2]]
    assert all(t.wallet_id != target.id for t in service.store.read_transactions())
    assert {w.id: len(service.list_transactions(w.id)) for w in remaining} == other_counts


def test_delete_wallet_unknown(service):
    with pytest.raises(NotFoundError):
        service.delete_wallet("missing")
    assert len(service.list_wallets()) == 3


def test_delete_then_recreate_same_address(service):
    target = service.list_wallets()[0]
    service.delete_wallet(target.id)
    wallets = service.create_wallet(target.address)
    assert wallets[-1].address == target.address
    assert wallets[-1].id != target.id


def test_concurrent_creates_are_not_lost(service):
    addresses = [f"bc1qconcurrent{i:04d}" for i in range(200)]
    with ThreadPoolExecutor(max_workers=16) as pool:
        list(pool.map(service.create_wallet, addresses))
    wallets = service.list_wallets()
    assert len(wallets) == 203
    assert {w.address for w in wallets} >= set(addresses)


def test_concurrent_syncs_keep_every_transaction(service):
    wallets = service.list_wallets()
    before = len(service.store.read_transactions())
    targets = [w.id for w in wallets] * 20
    with ThreadPoolExecutor(max_workers=16) as pool:
        results = list(pool.map(service.sync_wallet, targets))
    added = [t for batch in results for t in batch]
    stored = service.store.read_transactions()
    assert len(stored) == before + len(added)
    assert {t.id for t in added} <= {t.id for t in stored}
