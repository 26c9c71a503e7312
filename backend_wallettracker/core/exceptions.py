"""
Application-level exceptions.

Every domain error carries a ``kind`` (stable, machine-readable) and the HTTP
``status_code`` the API layer answers with. Duplicate addresses are reported
as 400, not 409, to stay wire-compatible with existing clients.
"""

from __future__ import annotations


class WalletTrackerError(Exception):
    """Base class for errors raised by the service and store layers."""

    kind = "internal"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.message}


class InvalidInputError(WalletTrackerError):
    """A required field is missing or malformed."""

    kind = "invalid_input"
    status_code = 400


class ConflictError(WalletTrackerError):
    """A unique key (wallet address) already exists."""

    kind = "conflict"
    status_code = 400


class NotFoundError(WalletTrackerError):
    """A referenced id does not exist."""

    kind = "not_found"
    status_code = 404


class InternalError(WalletTrackerError):
    """Store or serialization failure."""

    kind = "internal"
    status_code = 500


class StoreWriteError(InternalError):
    """Overwriting a collection document failed (disk full, permissions, ...)."""


class SimulatedFaultError(InternalError):
    """Raised-equivalent of an injected fault; same status as InternalError."""

    kind = "simulated_fault"
