"""
Application settings.

Responsibilities:
- Read configuration from environment variables and the .env file.
- Validate values and provide defaults for optional ones.
- Expose one typed, immutable Settings object shared by the API server,
  the store, main.py and the client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from backend_wallettracker.config.env import (
    DEFAULT_API_BASE_URL,
    DEFAULT_API_HOST,
    DEFAULT_API_PORT,
    DEFAULT_ERROR_FAILURE_RATE,
    env_bool,
    env_float,
    env_int,
    env_str,
    get_cors_origins,
    get_data_dir,
    is_production,
    load_tracker_env,
)
from backend_wallettracker.tracker_logging.logger import (
    DEFAULT_LOG_FORMAT,
    DEFAULT_LOG_LEVEL,
    LOG_FORMATS,
)


@dataclass(frozen=True)
class Settings:
    """Resolved configuration for one process."""

    data_dir: Path
    api_host: str = DEFAULT_API_HOST
    api_port: int = DEFAULT_API_PORT
    log_level: str = DEFAULT_LOG_LEVEL
    log_format: str = DEFAULT_LOG_FORMAT
    enable_error_simulation: bool = True
    error_failure_rate: float = DEFAULT_ERROR_FAILURE_RATE
    production: bool = False
    cors_origins: list[str] = field(default_factory=list)
    api_base_url: str = DEFAULT_API_BASE_URL


def get_settings() -> Settings:
    """
    Return the current application settings, read fresh from the environment.

    Raises:
        ValueError: if a numeric variable does not parse, the failure rate
            falls outside [0, 1] or LOG_FORMAT is unknown.
    """
    load_tracker_env()
    failure_rate = env_float("ERROR_FAILURE_RATE", DEFAULT_ERROR_FAILURE_RATE)
    if not 0.0 <= failure_rate <= 1.0:
        raise ValueError(f"ERROR_FAILURE_RATE must be within [0, 1], got {failure_rate}")
    log_format = env_str("LOG_FORMAT", DEFAULT_LOG_FORMAT).lower()
    if log_format not in LOG_FORMATS:
        raise ValueError(f"LOG_FORMAT must be one of {LOG_FORMATS}, got {log_format!r}")
    return Settings(
        data_dir=get_data_dir(),
        api_host=env_str("API_HOST", DEFAULT_API_HOST),
        api_port=env_int("API_PORT", env_int("PORT", DEFAULT_API_PORT)),
        log_level=env_str("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        log_format=log_format,
        enable_error_simulation=env_bool("ENABLE_ERROR_SIMULATION", True),
        error_failure_rate=failure_rate,
        production=is_production(),
        cors_origins=get_cors_origins(),
        api_base_url=env_str("API_BASE_URL", DEFAULT_API_BASE_URL).rstrip("/"),
    )
