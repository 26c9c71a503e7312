"""
Client package — async API client, retry controller, fetchers and UI state.

The fetchers keep a wallet list and a transaction list fresh against an API
that fails on purpose, retrying with exponential backoff.
"""

from backend_wallettracker.client.api_client import WalletAPIClient, WalletAPIError
from backend_wallettracker.client.fetchers import (
    CollectionFetcher,
    TransactionsFetcher,
    WalletsFetcher,
    is_empty_result_error,
)
from backend_wallettracker.client.retry import RetryController
from backend_wallettracker.client.state import AppState, AppStore
from backend_wallettracker.client.transaction_utils import BalanceData, calculate_balance

__all__ = [
    "AppState",
    "AppStore",
    "BalanceData",
    "CollectionFetcher",
    "RetryController",
    "TransactionsFetcher",
    "WalletAPIClient",
    "WalletAPIError",
    "WalletsFetcher",
    "calculate_balance",
    "is_empty_result_error",
]
