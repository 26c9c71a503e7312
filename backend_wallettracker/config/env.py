"""
Environment variable loading and parsing for the wallet tracker.

- DATA_DIR: directory holding wallets.json / transactions.json (default: <root>/data)
- API_HOST / API_PORT: bind address for main.py (default: 0.0.0.0:3000)
- ENABLE_ERROR_SIMULATION / ERROR_FAILURE_RATE: fault gate (default: on, 0.1)
- APP_ENV / CLIENT_URL: CORS origins (production allows CLIENT_URL only)
- API_BASE_URL: where the client talks to the API
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

# Project root: config is backend_wallettracker/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_DATA_DIR = _ROOT / "data"
DEFAULT_API_HOST = "0.0.0.0"
DEFAULT_API_PORT = 3000
DEFAULT_CLIENT_PORT = 5173
DEFAULT_API_BASE_URL = f"http://localhost:{DEFAULT_API_PORT}"
DEFAULT_ERROR_FAILURE_RATE = 0.1

# Dev servers allowed by CORS outside production
DEV_CORS_ORIGINS = (
    f"http://localhost:{DEFAULT_CLIENT_PORT}",
    f"http://localhost:{DEFAULT_API_PORT}",
    f"http://127.0.0.1:{DEFAULT_CLIENT_PORT}",
    f"http://127.0.0.1:{DEFAULT_API_PORT}",
)

_TRUTHY = ("1", "true", "yes", "on")
_FALSY = ("0", "false", "no", "off")


def load_tracker_env() -> None:
    """Load .env from project root. Safe to call multiple times; existing env wins."""
    from dotenv import load_dotenv

    load_dotenv(_ENV_PATH, override=False)


def env_str(name: str, default: str) -> str:
    return (os.getenv(name) or "").strip() or default


def env_bool(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    return default


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None


def get_data_dir() -> Path:
    """Return DATA_DIR from env, or <root>/data."""
    load_tracker_env()
    raw = (os.getenv("DATA_DIR") or "").strip()
    return Path(raw) if raw else DEFAULT_DATA_DIR


def is_production() -> bool:
    """Return True if APP_ENV (or NODE_ENV, for old deploy configs) is production."""
    load_tracker_env()
    raw = (os.getenv("APP_ENV") or os.getenv("NODE_ENV") or "development").strip().lower()
    return raw == "production"


def get_cors_origins() -> list[str]:
    """
    Production: CLIENT_URL only (empty list if unset).
    Otherwise: the local dev server origins.
    """
    load_tracker_env()
    if is_production():
        client_url = (os.getenv("CLIENT_URL") or "").strip()
        return [client_url] if client_url else []
    return list(DEV_CORS_ORIGINS)
