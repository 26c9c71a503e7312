"""
Tests for the flat-file store and sample data generation.
"""

from __future__ import annotations

import json
import random
from dataclasses import replace

import pytest

from backend_wallettracker.core.exceptions import StoreWriteError
from backend_wallettracker.database import SAMPLE_WALLETS, Transaction, Wallet
from backend_wallettracker.database.seed import (
    DATE_RANGE_FROM,
    DATE_RANGE_TO,
    build_sample_data,
    generate_transaction_batches,
)


def test_sample_wallet_definitions():
    """Production seed has three wallets with 10, 20 and 156,000 transactions."""
    assert [s.name for s in SAMPLE_WALLETS] == ["Coinbase", "Kraken", "Phantom"]
    assert [s.transaction_count for s in SAMPLE_WALLETS] == [10, 20, 156_000]
    assert len({s.address for s in SAMPLE_WALLETS}) == 3


def test_initialize_seeds_when_both_files_missing(store):
    seeded = store.initialize()
    assert seeded is True
    wallets = store.read_wallets()
    transactions = store.read_transactions()
    assert [w.name for w in wallets] == ["Coinbase", "Kraken", "Phantom"]
    assert len(transactions) == 3 + 5 + 7
    # Every transaction belongs to a seeded wallet
    ids = {w.id for w in wallets}
    assert all(t.wallet_id in ids for t in transactions)
    counts = [sum(1 for t in transactions if t.wallet_id == w.id) for w in wallets]
    assert counts == [3, 5, 7]


def test_initialize_is_idempotent(seeded_store):
    before = seeded_store.read_wallets()
    assert seeded_store.initialize() is False
    assert seeded_store.read_wallets() == before


def test_initialize_recreates_single_missing_file_empty(seeded_store):
    """One document missing: recreated empty, no reseed."""
    wallets = seeded_store.read_wallets()
    seeded_store.transactions_path.unlink()
    assert seeded_store.initialize() is False
    assert seeded_store.read_wallets() == wallets
    assert seeded_store.read_transactions() == []
    assert json.loads(seeded_store.transactions_path.read_text()) == []


def test_documents_use_camel_case_keys(seeded_store):
    wallet_doc = json.loads(seeded_store.wallets_path.read_text())
    tx_doc = json.loads(seeded_store.transactions_path.read_text())
    assert set(wallet_doc[0]) == {"id", "address", "name", "iconURL"}
    assert set(tx_doc[0]) == {"id", "walletId", "date", "balance", "confirmations"}


def test_read_corrupt_document_returns_empty(seeded_store):
    seeded_store.wallets_path.write_text("{not json")
    assert seeded_store.read_wallets() == []


def test_read_non_array_document_returns_empty(seeded_store):
    seeded_store.transactions_path.write_text(json.dumps({"id": "x"}))
    assert seeded_store.read_transactions() == []


def test_read_missing_document_returns_empty(store):
    assert store.read_wallets() == []
    assert store.read_transactions() == []


def test_write_then_read(store):
    store.initialize()
    wallet = Wallet(id="w1", address="addr-1", name="Kraken")
    tx = Transaction(id="t1", wallet_id="w1", date="2024-01-01T00:00:00.000+00:00", balance=-1.5, confirmations=3)
    store.write_wallets([wallet])
    store.write_transactions([tx])
    assert store.read_wallets() == [wallet]
    assert store.read_transactions() == [tx]
    # No temp files left behind
    leftovers = [p.name for p in store.data_dir.iterdir() if p.name.endswith(".tmp")]
    assert leftovers == []


def test_write_failure_raises_store_write_error(tmp_path):
    from backend_wallettracker.database import FlatFileStore

    store = FlatFileStore(tmp_path / "does-not-exist")
    with pytest.raises(StoreWriteError):
        store.write_wallets([])


def test_reset_reseeds(seeded_store):
    old_ids = {w.id for w in seeded_store.read_wallets()}
    seeded_store.write_wallets([])
    counts = seeded_store.reset()
    assert counts == (3, 15)
    new_wallets = seeded_store.read_wallets()
    assert len(new_wallets) == 3
    assert {w.id for w in new_wallets}.isdisjoint(old_ids)


def test_reset_with_missing_files(store):
    assert store.reset() == (3, 15)


def test_generate_transaction_batches_sizes():
    batches = list(generate_transaction_batches("w1", 2500, 100.0, random.Random(1), batch_size=1000))
    assert [len(b) for b in batches] == [1000, 1000, 500]
    txs = [t for b in batches for t in b]
    assert len({t.id for t in txs}) == 2500
    assert all(-100.0 <= t.balance <= 100.0 for t in txs)
    assert all(round(t.balance, 2) == t.balance for t in txs)
    assert all(1 <= t.confirmations <= 10 for t in txs)
    lo, hi = DATE_RANGE_FROM.isoformat()[:10], DATE_RANGE_TO.isoformat()[:10]
    assert all(lo <= t.date[:10] <= hi for t in txs)


def test_generate_transaction_batches_rejects_bad_size():
    with pytest.raises(ValueError):
        list(generate_transaction_batches("w1", 10, 1.0, random.Random(1), batch_size=0))


def test_build_sample_data_reproducible():
    samples = tuple(replace(s, transaction_count=4) for s in SAMPLE_WALLETS)
    first = build_sample_data(random.Random(3), samples=samples)
    second = build_sample_data(random.Random(3), samples=samples)
    assert first == second
