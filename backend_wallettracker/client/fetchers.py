"""
Data fetchers — client-side lifecycle of one remote collection.

WalletsFetcher (wallet list) and TransactionsFetcher (one wallet's
transactions) share CollectionFetcher: fetch on start or key change, classify
failures, and hand failed fetches to a RetryController until a fetch
succeeds, the failure is classified as "empty", or the attempt bound is hit.

Only one fetch per fetcher counts at a time: each request carries a sequence
number and results from superseded requests are dropped. Changing the key or
closing the fetcher cancels the pending retry.

Must be used from a running asyncio event loop.
"""

from __future__ import annotations

import asyncio
from typing import Any, Generic, TypeVar

from backend_wallettracker.client.api_client import WalletAPIClient, WalletAPIError
from backend_wallettracker.client.retry import RetryController
from backend_wallettracker.tracker_logging import get_logger

logger = get_logger(__name__)

K = TypeVar("K")

# Substrings that mark a failure as "no data" rather than an error
EMPTY_RESULT_MARKERS = ("404", "not found", "no transactions")


def is_empty_result_error(exc: Exception) -> bool:
    """True for not-found / no-data failures, which are shown as an empty list."""
    if isinstance(exc, WalletAPIError) and exc.is_not_found:
        return True
    message = str(exc).lower()
    return any(marker in message for marker in EMPTY_RESULT_MARKERS)


class CollectionFetcher(Generic[K]):
    """
    Base fetcher. Subclasses implement _load(key).

    Exposed state: items, loading (true only while a request is in flight),
    error, attempt_count, is_retrying, max_retries_reached.
    """

    name = "collection"

    def __init__(
        self,
        api: WalletAPIClient,
        key: K | None = None,
        *,
        retry: RetryController | None = None,
        requires_key: bool = False,
    ) -> None:
        self._api = api
        self._key = key
        self._requires_key = requires_key
        self._retry = retry or RetryController(name=self.name)
        self._request_seq = 0
        self._closed = False
        self.items: list[dict[str, Any]] = []
        self.loading = False
        self.error: str | None = None

    # ------------------------------------------------------------------
    # Exposed state
    # ------------------------------------------------------------------

    @property
    def key(self) -> K | None:
        return self._key

    @property
    def retry(self) -> RetryController:
        return self._retry

    @property
    def attempt_count(self) -> int:
        return self._retry.attempt_count

    @property
    def is_retrying(self) -> bool:
        return self._retry.is_retrying

    @property
    def max_retries_reached(self) -> bool:
        """Error showing and no further automatic retry will happen."""
        return self.error is not None and self._retry.max_retries_reached

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Issue the initial fetch (and schedule a retry if it fails)."""
        await self._fetch()
        self._maybe_schedule_retry()

    async def refetch(self) -> None:
        """One immediate attempt, skipping the backoff wait; drops any pending retry."""
        self._retry.cancel()
        await self._fetch()
        self._maybe_schedule_retry()

    async def _change_key(self, key: K | None) -> None:
        self._retry.cancel()
        self._retry.reset()
        self._key = key
        self._request_seq += 1
        self.error = None
        self.loading = False
        await self.start()

    async def close(self) -> None:
        """Tear down: cancel pending retries and ignore in-flight results."""
        self._closed = True
        self._request_seq += 1
        self._retry.cancel()

    async def wait_idle(self) -> None:
        """Wait until no retry is pending (used by callers that need a settled state)."""
        while True:
            task = self._retry.pending_task
            if task is None:
                break
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise

    # ------------------------------------------------------------------
    # Fetch cycle
    # ------------------------------------------------------------------

    async def _load(self, key: K | None) -> list[dict[str, Any]] | None:
        raise NotImplementedError

    async def _fetch(self) -> None:
        """Single fetch attempt; updates items/error unless superseded."""
        if self._closed:
            return
        if self._requires_key and self._key is None:
            self.items = []
            self.error = None
            self._retry.reset()
            return

        self._request_seq += 1
        seq = self._request_seq
        self.loading = True
        self.error = None
        try:
            data = await self._load(self._key)
        except Exception as e:
            if seq != self._request_seq:
                return
            if is_empty_result_error(e):
                logger.debug("fetch_empty_result", fetcher=self.name, key=self._key, error=str(e))
                self.items = []
                self.error = None
            else:
                self.error = str(e) or "An error occurred"
                logger.info(
                    "fetch_failed",
                    fetcher=self.name,
                    key=self._key,
                    attempt=self._retry.attempt_count,
                    error=self.error,
                )
            return
        finally:
            if seq == self._request_seq:
                self.loading = False

        if seq != self._request_seq:
            logger.debug("fetch_stale_result_dropped", fetcher=self.name, key=self._key)
            return
        self.items = list(data or [])
        self._retry.reset()

    def _maybe_schedule_retry(self) -> None:
        """If the last fetch left an error and attempts remain, start the retry chain."""
        if self._should_retry():
            self._retry.schedule(self._fetch, again=self._should_retry)

    def _should_retry(self) -> bool:
        """Checked after every settled fetch, inside the retry task itself."""
        if self._closed or self.error is None:
            return False
        if self._retry.max_retries_reached:
            logger.warning(
                "fetch_max_retries_reached",
                fetcher=self.name,
                key=self._key,
                attempts=self._retry.attempt_count,
            )
            return False
        return True


class WalletsFetcher(CollectionFetcher[None]):
    """Wallet list plus the create/delete/sync actions that change it."""

    name = "wallets"

    def __init__(self, api: WalletAPIClient, *, retry: RetryController | None = None) -> None:
        super().__init__(api, None, retry=retry)

    @property
    def wallets(self) -> list[dict[str, Any]]:
        return self.items

    async def _load(self, key: None) -> list[dict[str, Any]] | None:
        return await self._api.get_all_wallets()

    async def create_wallet(self, address: str) -> str | None:
        """
        Create a wallet and return its id (the last element of the returned list).

        Errors (duplicate address, simulated faults) propagate to the caller for
        inline form feedback; they never set self.error or trigger retries.
        """
        self.error = None
        updated = await self._api.create_wallet(address)
        self.items = list(updated or [])
        new_wallet = self.items[-1] if self.items else None
        return new_wallet["id"] if new_wallet else None

    async def delete_wallet(self, wallet_id: str) -> bool:
        try:
            self.error = None
            await self._api.delete_wallet(wallet_id)
        except WalletAPIError as e:
            self.error = e.message
            self._maybe_schedule_retry()
            return False
        self.items = [w for w in self.items if w.get("id") != wallet_id]
        return True

    async def sync_wallet(self, wallet_id: str) -> tuple[list[dict[str, Any]], list[dict[str, Any]] | None]:
        """
        Sync a wallet, then re-list wallets (sync does not return them).
        Returns (new_transactions, updated_wallets); ([], None) on failure, in
        which case the wallet list is retried like a failed fetch.
        """
        try:
            self.error = None
            new_transactions = await self._api.sync_wallet(wallet_id)
            updated = await self._api.get_all_wallets()
        except WalletAPIError as e:
            self.error = e.message
            self._maybe_schedule_retry()
            return [], None
        self.items = list(updated or [])
        return list(new_transactions or []), self.items


class TransactionsFetcher(CollectionFetcher[str]):
    """Transactions of the selected wallet; no wallet selected means no list."""

    name = "transactions"

    def __init__(
        self,
        api: WalletAPIClient,
        wallet_id: str | None = None,
        *,
        retry: RetryController | None = None,
    ) -> None:
        super().__init__(api, wallet_id, retry=retry, requires_key=True)

    @property
    def wallet_id(self) -> str | None:
        return self._key

    @property
    def transactions(self) -> list[dict[str, Any]]:
        return self.items

    async def set_wallet_id(self, wallet_id: str | None) -> None:
        """Switch wallets: cancel pending retries, reset retry state, refetch."""
        if wallet_id == self._key and not self._closed:
            return
        await self._change_key(wallet_id)

    async def _load(self, key: str | None) -> list[dict[str, Any]] | None:
        return await self._api.get_wallet_transactions(key)
