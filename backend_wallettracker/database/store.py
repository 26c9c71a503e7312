"""
Flat-file store — two collections persisted as whole JSON array documents.

wallets.json and transactions.json are read in full, mutated in memory by the
caller and overwritten in full. Reads degrade to an empty collection on any
read or parse failure; writes raise StoreWriteError. The store does not
enforce referential integrity, and a write of one document is never
coordinated with a write of the other (the service layer owns both concerns).
"""

from __future__ import annotations

import json
import os
import random
import tempfile
from pathlib import Path
from typing import Any, Callable, TypeVar

from backend_wallettracker.core.exceptions import StoreWriteError
from backend_wallettracker.database.models import Transaction, Wallet
from backend_wallettracker.database.seed import (
    SAMPLE_WALLETS,
    TRANSACTION_BATCH_SIZE,
    SampleWallet,
    build_sample_data,
)
from backend_wallettracker.tracker_logging import get_logger

logger = get_logger(__name__)

WALLETS_FILENAME = "wallets.json"
TRANSACTIONS_FILENAME = "transactions.json"

T = TypeVar("T")


class FlatFileStore:
    """
    JSON-document store for the wallet and transaction collections.

    One instance per data directory. Not thread-safe on its own; callers that
    interleave read-modify-write cycles must serialize them.
    """

    def __init__(
        self,
        data_dir: str | Path,
        *,
        rng: random.Random | None = None,
        samples: tuple[SampleWallet, ...] = SAMPLE_WALLETS,
        batch_size: int = TRANSACTION_BATCH_SIZE,
    ) -> None:
        """
        Args:
            data_dir: Directory holding wallets.json and transactions.json.
            rng: Random source for seed generation (seeded in tests).
            samples: Sample wallet definitions used by seeding.
            batch_size: Seed rows generated per batch.
        """
        self._data_dir = Path(data_dir)
        self._rng = rng or random.Random()
        self._samples = samples
        self._batch_size = batch_size

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def wallets_path(self) -> Path:
        return self._data_dir / WALLETS_FILENAME

    @property
    def transactions_path(self) -> Path:
        return self._data_dir / TRANSACTIONS_FILENAME

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> bool:
        """
        Create the data directory and any missing document.

        Seeds sample data only when both documents were missing; a single
        missing document is recreated empty. Returns True if seeding ran.
        """
        self._data_dir.mkdir(parents=True, exist_ok=True)
        wallets_exist = self.wallets_path.exists()
        transactions_exist = self.transactions_path.exists()
        if not wallets_exist:
            self._write_document(self.wallets_path, [])
        if not transactions_exist:
            self._write_document(self.transactions_path, [])
        if not wallets_exist and not transactions_exist:
            self.populate_sample_data()
            return True
        if not (wallets_exist and transactions_exist):
            logger.warning(
                "store_partial_state",
                wallets_exist=wallets_exist,
                transactions_exist=transactions_exist,
            )
        logger.info("store_initialized", data_dir=str(self._data_dir), seeded=False)
        return False

    def populate_sample_data(self) -> tuple[int, int]:
        """Generate the sample wallets and transactions and overwrite both documents."""
        logger.info("store_seed_start", wallet_count=len(self._samples))
        wallets, transactions = build_sample_data(
            self._rng, samples=self._samples, batch_size=self._batch_size
        )
        self.write_wallets(wallets)
        self.write_transactions(transactions)
        logger.info(
            "store_seed_done",
            wallet_count=len(wallets),
            transaction_count=len(transactions),
            per_wallet={s.address: s.transaction_count for s in self._samples},
        )
        return len(wallets), len(transactions)

    def reset(self) -> tuple[int, int]:
        """Delete both documents (missing files ignored) and reseed unconditionally."""
        logger.info("store_reset_start", data_dir=str(self._data_dir))
        self._data_dir.mkdir(parents=True, exist_ok=True)
        for path in (self.wallets_path, self.transactions_path):
            try:
                path.unlink()
                logger.info("store_reset_removed", path=str(path))
            except FileNotFoundError:
                pass
        counts = self.populate_sample_data()
        logger.info("store_reset_done")
        return counts

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    def read_wallets(self) -> list[Wallet]:
        return self._read_collection(self.wallets_path, Wallet.from_dict)

    def read_transactions(self) -> list[Transaction]:
        return self._read_collection(self.transactions_path, Transaction.from_dict)

    def write_wallets(self, wallets: list[Wallet]) -> None:
        self._write_document(self.wallets_path, [w.to_dict() for w in wallets])

    def write_transactions(self, transactions: list[Transaction]) -> None:
        self._write_document(self.transactions_path, [t.to_dict() for t in transactions])

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def _read_collection(self, path: Path, parse: Callable[[dict[str, Any]], T]) -> list[T]:
        """Return parsed records, or [] on a missing, unreadable or malformed document."""
        try:
            with path.open("r", encoding="utf-8") as f:
                raw = json.load(f)
            if not isinstance(raw, list):
                raise ValueError(f"expected a JSON array, got {type(raw).__name__}")
            return [parse(item) for item in raw]
        except FileNotFoundError:
            logger.debug("store_read_missing", path=str(path))
            return []
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("store_read_failed", path=str(path), error=str(e))
            return []

    def _write_document(self, path: Path, payload: list[dict[str, Any]]) -> None:
        """
        Overwrite path with payload via a temp file in the same directory and
        os.replace, so readers see either the old or the new document.
        """
        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_name, path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            logger.error("store_write_failed", path=str(path), error=str(e))
            raise StoreWriteError(f"Failed to write {path.name}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
