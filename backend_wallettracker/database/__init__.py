"""
Persistence layer — wallet and transaction collections as flat JSON documents.

FlatFileStore reads and overwrites whole documents; seed generates the
synthetic sample data used on first run and by reset_db.py.
"""

from backend_wallettracker.database.models import (
    WALLET_PROVIDERS,
    Transaction,
    Wallet,
)
from backend_wallettracker.database.seed import SAMPLE_WALLETS, SampleWallet
from backend_wallettracker.database.store import FlatFileStore

__all__ = [
    "FlatFileStore",
    "SAMPLE_WALLETS",
    "SampleWallet",
    "Transaction",
    "WALLET_PROVIDERS",
    "Wallet",
]
