"""Derived balance and display helpers for transaction lists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

MIN_DISPLAY_BALANCE = 0.01

RECEIVED = "received"
SENT = "sent"


@dataclass(frozen=True)
class BalanceData:
    balance: float
    is_normalized: bool
    original_balance: float | None = None


def calculate_balance(transactions: Iterable[dict[str, Any]] | None) -> BalanceData:
    """
    Net position of a wallet for display.

    A negative net is shown as its absolute value (is_normalized=True), and any
    non-empty history shows at least MIN_DISPLAY_BALANCE.
    """
    txs = list(transactions or [])
    if not txs:
        return BalanceData(balance=0.0, is_normalized=False)
    net = sum(float(tx["balance"]) for tx in txs)
    return BalanceData(
        balance=max(abs(net), MIN_DISPLAY_BALANCE),
        is_normalized=net < 0,
        original_balance=net,
    )


def transaction_status(balance: float) -> str:
    return RECEIVED if balance >= 0 else SENT


def format_transaction_amount(balance: float) -> str:
    sign = "+" if balance >= 0 else "-"
    return f"{sign}{abs(balance):.2f} BTC"
