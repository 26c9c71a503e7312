"""
Structured logging for the wallet tracker.

JSON logs with timestamp, event_type and per-call context (wallet_id, path, ...).
"""

from backend_wallettracker.tracker_logging.logger import (
    bind_wallet,
    configure_structlog,
    get_logger,
)

__all__ = ["bind_wallet", "configure_structlog", "get_logger"]
