"""
Wallet/transaction business logic on top of the flat-file store.

Enforces address uniqueness and wallet → transaction referential integrity,
generates synthetic transactions on sync, and cascades deletes. Each
read-modify-write cycle runs under one lock so concurrent requests cannot
lose each other's updates.
"""

from __future__ import annotations

import random
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable

from backend_wallettracker.core.exceptions import (
    ConflictError,
    InvalidInputError,
    NotFoundError,
)
from backend_wallettracker.database.models import WALLET_PROVIDERS, Transaction, Wallet
from backend_wallettracker.database.seed import new_id
from backend_wallettracker.database.store import FlatFileStore
from backend_wallettracker.tracker_logging import bind_wallet

# Sync generation parameters
SYNC_MIN_NEW_TRANSACTIONS = 1
SYNC_MAX_NEW_TRANSACTIONS = 3
SYNC_RECEIVE_PROBABILITY = 0.7
SYNC_MIN_AMOUNT = 0.01
SYNC_MAX_RECEIVE_AMOUNT = 2.5
SYNC_MAX_SEND_AMOUNT = 1.0
SYNC_MAX_CONFIRMATIONS = 6
SYNC_AMOUNT_DECIMALS = 8

WALLET_NOT_FOUND = "Wallet not found"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WalletService:
    """Create, list, sync and delete wallets and their transactions."""

    def __init__(
        self,
        store: FlatFileStore,
        *,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = _utcnow,
        providers: tuple[str, ...] = WALLET_PROVIDERS,
    ) -> None:
        self._store = store
        self._rng = rng or random.Random()
        self._clock = clock
        self._providers = providers
        self._lock = threading.RLock()

    @property
    def store(self) -> FlatFileStore:
        return self._store

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_wallets(self) -> list[Wallet]:
        with self._lock:
            return self._store.read_wallets()

    def list_transactions(self, wallet_id: str) -> list[Transaction]:
        """Return the wallet's transactions in insertion order; NotFoundError if the wallet is unknown."""
        with self._lock:
            self._require_wallet(self._store.read_wallets(), wallet_id)
            return [t for t in self._store.read_transactions() if t.wallet_id == wallet_id]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_wallet(self, address: str | None) -> list[Wallet]:
        """
        Add a wallet for address and return the whole updated collection.

        The new wallet is the last element. The address is stored as given.
        Raises InvalidInputError for a missing or blank address and
        ConflictError if the address is already tracked.
        """
        if not address or not address.strip():
            raise InvalidInputError("Address is required")
        with self._lock:
            wallets = self._store.read_wallets()
            if any(w.address == address for w in wallets):
                raise ConflictError("Wallet with this address already exists")
            wallet = Wallet(
                id=new_id(),
                address=address,
                name=self._rng.choice(self._providers),
                icon_url="",
            )
            wallets.append(wallet)
            self._store.write_wallets(wallets)
        bind_wallet(wallet.id, __name__).info("wallet_created", name=wallet.name)
        return wallets

    def sync_wallet(self, wallet_id: str) -> list[Transaction]:
        """
        Append 1-3 synthetic transactions to the wallet and return only those.

        Sent amounts are capped by min(1.0, max(0.01, net balance)); this is a
        soft cap, so repeated syncs can still drive the net balance negative.
        """
        with self._lock:
            self._require_wallet(self._store.read_wallets(), wallet_id)
            transactions = self._store.read_transactions()
            current_balance = sum(t.balance for t in transactions if t.wallet_id == wallet_id)
            new_transactions = self._generate_sync_transactions(wallet_id, current_balance)
            transactions.extend(new_transactions)
            self._store.write_transactions(transactions)
        bind_wallet(wallet_id, __name__).info(
            "wallet_synced",
            new_transactions=len(new_transactions),
            net_balance_before=round(current_balance, SYNC_AMOUNT_DECIMALS),
        )
        return new_transactions

    def delete_wallet(self, wallet_id: str) -> None:
        """
        Remove the wallet and all of its transactions.

        Two document writes: transactions first, then wallets. A crash between
        them leaves a wallet without history, never transactions without a wallet.
        """
        with self._lock:
            wallets = self._store.read_wallets()
            self._require_wallet(wallets, wallet_id)
            transactions = self._store.read_transactions()
            remaining = [t for t in transactions if t.wallet_id != wallet_id]
            self._store.write_transactions(remaining)
            self._store.write_wallets([w for w in wallets if w.id != wallet_id])
        bind_wallet(wallet_id, __name__).info(
            "wallet_deleted",
            removed_transactions=len(transactions) - len(remaining),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _require_wallet(wallets: list[Wallet], wallet_id: str) -> Wallet:
        for wallet in wallets:
            if wallet.id == wallet_id:
                return wallet
        raise NotFoundError(WALLET_NOT_FOUND)

    def _generate_sync_transactions(self, wallet_id: str, current_balance: float) -> list[Transaction]:
        rng = self._rng
        now = self._clock()
        count = rng.randint(SYNC_MIN_NEW_TRANSACTIONS, SYNC_MAX_NEW_TRANSACTIONS)
        send_cap = min(SYNC_MAX_SEND_AMOUNT, max(SYNC_MIN_AMOUNT, current_balance))
        out: list[Transaction] = []
        for index in range(count):
            # Spread back from now: index days plus up to one day of jitter
            date = now - timedelta(days=index) - timedelta(days=rng.random())
            is_receive = rng.random() < SYNC_RECEIVE_PROBABILITY
            upper = SYNC_MAX_RECEIVE_AMOUNT if is_receive else send_cap
            amount = round(rng.uniform(SYNC_MIN_AMOUNT, upper), SYNC_AMOUNT_DECIMALS)
            out.append(
                Transaction(
                    id=new_id(),
                    wallet_id=wallet_id,
                    date=date.isoformat(timespec="milliseconds"),
                    balance=amount if is_receive else -amount,
                    confirmations=rng.randint(1, SYNC_MAX_CONFIRMATIONS),
                )
            )
        return out
