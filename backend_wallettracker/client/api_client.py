"""
Async HTTP client for the wallet tracker API.

Uses httpx.AsyncClient. Non-2xx responses raise WalletAPIError carrying the
body's "error" field (or "HTTP error! status: N") and the status code;
transport failures raise WalletAPIError with status_code=None.

Usage:
    async with WalletAPIClient() as api:  # API_BASE_URL, default http://localhost:3000
        wallets = await api.get_all_wallets()
"""

from __future__ import annotations

from typing import Any

import httpx

from backend_wallettracker.config import get_settings
from backend_wallettracker.tracker_logging import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT_SEC = 30.0

WALLETS_PATH = "/wallets"
HEALTH_PATH = "/health"


def wallet_path(wallet_id: str) -> str:
    return f"{WALLETS_PATH}/{wallet_id}"


def sync_path(wallet_id: str) -> str:
    return f"{WALLETS_PATH}/{wallet_id}/sync"


class WalletAPIError(Exception):
    """Raised when the API returns an error response or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class WalletAPIClient:
    """Client for the wallet tracker API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT_SEC,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            base_url: API root; defaults to Settings.api_base_url (API_BASE_URL).
            timeout: Per-request timeout in seconds.
            transport: httpx transport override (MockTransport or ASGITransport in tests).
        """
        if base_url is None:
            base_url = get_settings().api_base_url
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "WalletAPIClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, *, json: Any = None) -> Any:
        try:
            resp = await self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            logger.warning("api_request_transport_error", method=method, path=path, error=str(e))
            raise WalletAPIError(f"Network error: {e}") from e
        if resp.is_error:
            try:
                payload = resp.json()
            except ValueError:
                payload = None
            message = None
            if isinstance(payload, dict):
                message = payload.get("error")
            message = message or f"HTTP error! status: {resp.status_code}"
            logger.info("api_request_failed", method=method, path=path, status=resp.status_code, error=message)
            raise WalletAPIError(message, status_code=resp.status_code, payload=payload)
        return resp.json()

    async def get_all_wallets(self) -> list[dict[str, Any]]:
        """Fetch all wallets."""
        return await self._request("GET", WALLETS_PATH)

    async def create_wallet(self, address: str) -> list[dict[str, Any]]:
        """Create a wallet; returns the whole updated wallet list."""
        return await self._request("POST", WALLETS_PATH, json={"address": address})

    async def delete_wallet(self, wallet_id: str) -> dict[str, Any]:
        return await self._request("DELETE", wallet_path(wallet_id))

    async def sync_wallet(self, wallet_id: str) -> list[dict[str, Any]]:
        """Sync a wallet; returns only the newly created transactions."""
        return await self._request("POST", sync_path(wallet_id))

    async def get_wallet_transactions(self, wallet_id: str) -> list[dict[str, Any]]:
        return await self._request("GET", wallet_path(wallet_id))

    async def health(self) -> dict[str, Any]:
        """Liveness probe."""
        return await self._request("GET", HEALTH_PATH)
