"""
Tests for balance derivation and amount formatting.
"""

from __future__ import annotations

import pytest

from backend_wallettracker.client.transaction_utils import (
    calculate_balance,
    format_transaction_amount,
    transaction_status,
)


def test_empty_history():
    data = calculate_balance([])
    assert data.balance == 0.0
    assert data.is_normalized is False
    assert data.original_balance is None
    assert calculate_balance(None).balance == 0.0


def test_positive_net():
    data = calculate_balance([{"balance": 1.5}, {"balance": -0.5}])
    assert data.balance == pytest.approx(1.0)
    assert data.is_normalized is False
    assert data.original_balance == pytest.approx(1.0)


def test_negative_net_is_normalized():
    data = calculate_balance([{"balance": 0.5}, {"balance": -2.0}])
    assert data.balance == pytest.approx(1.5)
    assert data.is_normalized is True
    assert data.original_balance == pytest.approx(-1.5)


def test_tiny_net_shows_minimum():
    data = calculate_balance([{"balance": 1.0}, {"balance": -1.0}])
    assert data.balance == 0.01
    assert data.original_balance == pytest.approx(0.0)


def test_status_and_format():
    assert transaction_status(0.5) == "received"
    assert transaction_status(-0.5) == "sent"
    assert format_transaction_amount(1.5) == "+1.50 BTC"
    assert format_transaction_amount(-0.25) == "-0.25 BTC"
