"""
Main entrypoint: initialize the flat-file store and serve the API with uvicorn.

On SIGINT/SIGTERM the shutdown token is set before uvicorn starts draining, so
the fault gate stops injecting errors into requests that are still finishing.

Env: DATA_DIR, API_HOST, API_PORT, ENABLE_ERROR_SIMULATION, ERROR_FAILURE_RATE,
LOG_LEVEL, LOG_FORMAT, APP_ENV, CLIENT_URL (see backend_wallettracker.config.env).
"""

from __future__ import annotations

import sys
import threading
from typing import Any

import uvicorn

from backend_wallettracker.tracker_logging import configure_structlog, get_logger

logger = get_logger("main")


class DrainingServer(uvicorn.Server):
    """uvicorn server that raises the shutdown token as soon as a signal arrives."""

    def __init__(self, config: uvicorn.Config, shutdown: threading.Event) -> None:
        super().__init__(config)
        self._shutdown = shutdown

    def handle_exit(self, sig: int, frame: Any) -> None:
        if not self._shutdown.is_set():
            logger.info("main_shutdown_signal", signal=int(sig))
        self._shutdown.set()
        super().handle_exit(sig, frame)


def main() -> None:
    """Build settings and app, then run uvicorn in the main thread."""
    from backend_wallettracker.api_server.server import create_app
    from backend_wallettracker.config import get_settings

    try:
        settings = get_settings()
    except ValueError as e:
        logger.error("main_config_error", error=str(e))
        sys.exit(1)
    configure_structlog(settings.log_level, settings.log_format)

    shutdown = threading.Event()
    app = create_app(settings, shutdown=shutdown)

    logger.info(
        "main_server_starting",
        host=settings.api_host,
        port=settings.api_port,
        data_dir=str(settings.data_dir),
        routes=[
            "GET /wallets",
            "POST /wallets",
            "GET /wallets/{walletId}",
            "POST /wallets/{walletId}/sync",
            "DELETE /wallets/{walletId}",
            "GET /health",
        ],
    )
    config = uvicorn.Config(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )
    DrainingServer(config, shutdown).run()


if __name__ == "__main__":
    main()
