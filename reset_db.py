"""
Reset the flat-file database: delete wallets.json / transactions.json and reseed.

Run: python reset_db.py [--data-dir DIR]
Restart the server afterwards so it serves the fresh data.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from backend_wallettracker.config import get_settings
from backend_wallettracker.core.exceptions import StoreWriteError
from backend_wallettracker.database import FlatFileStore
from backend_wallettracker.tracker_logging import configure_structlog, get_logger

logger = get_logger("reset_db")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Delete and reseed the wallet tracker data files.")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding wallets.json and transactions.json (default: DATA_DIR or ./data)",
    )
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        logger.error("reset_db_config_error", error=str(e))
        return 1
    configure_structlog(settings.log_level, settings.log_format)

    data_dir = args.data_dir or settings.data_dir
    store = FlatFileStore(data_dir)
    try:
        wallets, transactions = store.reset()
    except StoreWriteError as e:
        logger.error("reset_db_failed", data_dir=str(data_dir), error=str(e))
        return 1
    logger.info("reset_db_done", data_dir=str(data_dir), wallets=wallets, transactions=transactions)
    return 0


if __name__ == "__main__":
    sys.exit(main())
