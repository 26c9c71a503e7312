"""
Synthetic sample data for first-run population and resets.

Three sample wallets carry 10, 20 and 156,000 transactions. Rows are produced
in batches of 1000 by a generator so the large wallet never needs a second
full-size intermediate list.
"""

from __future__ import annotations

import random
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator

from backend_wallettracker.database.models import Transaction, Wallet
from backend_wallettracker.tracker_logging import get_logger

logger = get_logger(__name__)

TRANSACTION_BATCH_SIZE = 1000
PROGRESS_LOG_EVERY = 10_000

# Seed dates fall in this window (UTC)
DATE_RANGE_FROM = datetime(2023, 1, 1, tzinfo=timezone.utc)
DATE_RANGE_TO = datetime(2024, 12, 31, tzinfo=timezone.utc)

_ICON_BASE = "https://coin-tracker-public.s3.us-west-1.amazonaws.com/crypto-icons/icons"


@dataclass(frozen=True)
class SampleWallet:
    address: str
    name: str
    icon_url: str
    transaction_count: int
    balance_magnitude: float
    """Balances are drawn from [-magnitude, +magnitude]."""


SAMPLE_WALLETS: tuple[SampleWallet, ...] = (
    SampleWallet(
        address="3E8ociqZa9mZUSwGdSmAEMAoAxBK3FNDcd",
        name="Coinbase",
        icon_url=f"{_ICON_BASE}/coinbase-wallet.svg",
        transaction_count=10,
        balance_magnitude=1000.0,
    ),
    SampleWallet(
        address="bc1q0sg9rdst255gtldsmcf8rk0764avqy2h2ksqs5",
        name="Kraken",
        icon_url=f"{_ICON_BASE}/kraken.svg",
        transaction_count=20,
        balance_magnitude=2000.0,
    ),
    SampleWallet(
        address="bc1qm34lsc65zpw79lxes69zkqmk6ee3ewf0j77s3h",
        name="Phantom",
        icon_url=f"{_ICON_BASE}/phantom_new.svg",
        transaction_count=156_000,
        balance_magnitude=5000.0,
    ),
)


def new_id(rng: random.Random | None = None) -> str:
    """UUID4 string; drawn from rng when given so seeded runs are reproducible."""
    if rng is None:
        return str(uuid.uuid4())
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def random_seed_date(rng: random.Random) -> str:
    start = DATE_RANGE_FROM.timestamp()
    end = DATE_RANGE_TO.timestamp()
    ts = rng.uniform(start, end)
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat(timespec="milliseconds")


def generate_transaction_batches(
    wallet_id: str,
    count: int,
    balance_magnitude: float,
    rng: random.Random,
    batch_size: int = TRANSACTION_BATCH_SIZE,
) -> Iterator[list[Transaction]]:
    """Yield lists of at most batch_size transactions until count rows are produced."""
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    produced = 0
    while produced < count:
        size = min(batch_size, count - produced)
        yield [
            Transaction(
                id=new_id(rng),
                wallet_id=wallet_id,
                date=random_seed_date(rng),
                balance=round(rng.uniform(-balance_magnitude, balance_magnitude), 2),
                confirmations=rng.randint(1, 10),
            )
            for _ in range(size)
        ]
        produced += size
        if produced % PROGRESS_LOG_EVERY == 0 or produced == count:
            logger.info("seed_progress", wallet_id=wallet_id, generated=produced, total=count)


def build_sample_data(
    rng: random.Random | None = None,
    samples: tuple[SampleWallet, ...] = SAMPLE_WALLETS,
    batch_size: int = TRANSACTION_BATCH_SIZE,
) -> tuple[list[Wallet], list[Transaction]]:
    """Return (wallets, transactions) for the given sample definitions."""
    rng = rng or random.Random()
    wallets: list[Wallet] = []
    transactions: list[Transaction] = []
    for sample in samples:
        wallet = Wallet(
            id=new_id(rng),
            address=sample.address,
            name=sample.name,
            icon_url=sample.icon_url,
        )
        wallets.append(wallet)
        if sample.transaction_count >= PROGRESS_LOG_EVERY:
            logger.info(
                "seed_large_wallet_start",
                address=sample.address,
                transaction_count=sample.transaction_count,
            )
        for batch in generate_transaction_batches(
            wallet.id, sample.transaction_count, sample.balance_magnitude, rng, batch_size
        ):
            transactions.extend(batch)
    return wallets, transactions
