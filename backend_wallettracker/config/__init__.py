"""
Configuration management for the wallet tracker.

Loads settings from environment variables and an optional .env file.
Exposes a single source of truth for server, store and client configuration.
"""

from backend_wallettracker.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
