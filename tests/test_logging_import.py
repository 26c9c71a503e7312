"""
Test that tracker_logging can be imported without circular import and logger works.
"""

from __future__ import annotations

import json

import pytest
import structlog
from structlog.testing import capture_logs


@pytest.fixture
def restore_structlog():
    """Put back the process-wide structlog configuration after the test."""
    saved = structlog.get_config()
    yield
    structlog.configure(**saved)


def test_logging_import():
    """Import get_logger from tracker_logging and use the logger."""
    from backend_wallettracker.tracker_logging import get_logger

    logger = get_logger("test")
    assert logger is not None
    assert hasattr(logger, "info")
    assert hasattr(logger, "debug")
    assert hasattr(logger, "warning")
    assert hasattr(logger, "error")
    # Smoke test: call info (should not raise)
    logger.info("test_message", key="value")


def test_configure_applies_level_and_format(capsys, restore_structlog):
    """Loggers created at import pick up a later configure_structlog call."""
    from backend_wallettracker.tracker_logging import configure_structlog, get_logger

    logger = get_logger("test.configure")
    configure_structlog("WARNING", "json")
    logger.info("hidden_event")
    logger.warning("shown_event", key="value")

    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["event_type"] == "shown_event"
    assert record["level"] == "warning"
    assert record["logger"] == "test.configure"
    assert record["key"] == "value"
    assert record["timestamp"]


def test_configure_rejects_unknown_format(restore_structlog):
    from backend_wallettracker.tracker_logging import configure_structlog

    with pytest.raises(ValueError):
        configure_structlog("INFO", "xml")


def test_service_logs_bind_wallet_id(service):
    """Per-wallet service log lines carry wallet_id as bound context."""
    wallet = service.list_wallets()[0]
    with capture_logs() as logs:
        service.sync_wallet(wallet.id)
    synced = [e for e in logs if e.get("event") == "wallet_synced"]
    assert len(synced) == 1
    assert synced[0]["wallet_id"] == wallet.id
    assert synced[0]["logger"] == "backend_wallettracker.services.wallet_service"
    assert 1 <= synced[0]["new_transactions"] <= 3


def test_bind_wallet():
    from backend_wallettracker.tracker_logging import bind_wallet

    with capture_logs() as logs:
        bind_wallet("w-1", "test.wallet").info("wallet_test_message")
    assert logs[0]["wallet_id"] == "w-1"
    assert logs[0]["logger"] == "test.wallet"
