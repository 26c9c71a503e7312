"""
Domain models for the flat-file collections.

Wallets and transactions as plain dataclasses; JSON documents use camelCase
keys (walletId, iconURL) so files and API payloads match the client contract.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

WALLET_PROVIDERS = ("Coinbase", "Kraken", "Phantom")


@dataclass
class Wallet:
    """Tracked wallet."""

    id: str
    address: str
    name: str
    icon_url: str = ""
    """Empty until the wallet has been synced once."""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "address": self.address,
            "name": self.name,
            "iconURL": self.icon_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Wallet":
        return cls(
            id=str(data["id"]),
            address=str(data["address"]),
            name=str(data.get("name") or ""),
            icon_url=str(data.get("iconURL") or ""),
        )


@dataclass
class Transaction:
    """Single wallet transaction; positive balance received, negative sent."""

    id: str
    wallet_id: str
    date: str
    """ISO 8601 UTC timestamp."""
    balance: float
    confirmations: int

    @property
    def is_received(self) -> bool:
        return self.balance >= 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "walletId": self.wallet_id,
            "date": self.date,
            "balance": self.balance,
            "confirmations": self.confirmations,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        return cls(
            id=str(data["id"]),
            wallet_id=str(data["walletId"]),
            date=str(data["date"]),
            balance=float(data["balance"]),
            confirmations=int(data["confirmations"]),
        )
