"""
Structured logging: timestamp, level, event_type and keyword context.

structlog with ISO timestamps and consistent keys so API, store and client
logs can be grepped or shipped to an aggregator the same way. Modules call
get_logger(__name__) at import and log snake_case event names with keyword
fields; per-wallet lines go through bind_wallet().

Level and renderer come from Settings (LOG_LEVEL / LOG_FORMAT): entrypoints
call configure_structlog(settings.log_level, settings.log_format) once at
startup. Module loggers resolve the configuration on first use, so import
order does not matter. Until then the defaults (INFO, JSON) apply.

Uses only Python stdlib logging and structlog; no backend_wallettracker imports
to avoid circular imports.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Any

import structlog

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "json"
LOG_FORMATS = ("json", "console")


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Ensure timestamp is always present (ISO 8601)."""
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Rename structlog 'event' to event_type; keep message if present."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def configure_structlog(
    log_level: str = DEFAULT_LOG_LEVEL,
    log_format: str = DEFAULT_LOG_FORMAT,
) -> None:
    """
    (Re)configure structlog: renderer, timestamp, level filter, event_type.

    Args:
        log_level: Standard level name (DEBUG, INFO, ...); unknown names mean INFO.
        log_format: "json" for deployments, "console" for local development.
    """
    level = getattr(logging, log_level.strip().upper(), logging.INFO)
    fmt = log_format.strip().lower()
    if fmt not in LOG_FORMATS:
        raise ValueError(f"LOG_FORMAT must be one of {LOG_FORMATS}, got {log_format!r}")

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
        _normalize_event,
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


# Defaults until an entrypoint applies Settings
if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> Any:
    """
    Return a lazily configured structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("wallet_synced", wallet_id=wallet_id, new_transactions=2)

    Output (JSON): {"event_type": "wallet_synced", "wallet_id": "...",
    "new_transactions": 2, "timestamp": "...", "level": "info", "logger": "module.name"}
    """
    return structlog._config.BoundLoggerLazyProxy(
        None, logger_factory_args=(name,), initial_values={"logger": name}
    )


def bind_wallet(wallet_id: str, name: str = "backend_wallettracker") -> Any:
    """Return a logger for name with wallet_id bound to all subsequent log calls."""
    return get_logger(name).bind(wallet_id=wallet_id)
