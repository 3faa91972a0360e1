"""Tests for money helpers and order numbers."""

import re
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from apps.core import utils
from apps.orders.state import can_cancel, can_refund, is_forward_transition, is_terminal


class TestMoney:
    @pytest.mark.parametrize("value, expected", [
        ("1.005", "1.01"),
        ("2.675", "2.68"),
        ("0.125", "0.13"),
        (10, "10.00"),
        (Decimal("3.14159"), "3.14"),
    ])
    def test_round_money_half_up(self, value, expected):
        assert utils.round_money(value) == Decimal(expected)

    @pytest.mark.parametrize("value", [None, True, "abc", "NaN", "Infinity", object()])
    def test_to_decimal_rejects_non_numbers(self, value):
        assert utils.to_decimal(value) is None

    def test_to_decimal_accepts_floats_as_written(self):
        assert utils.to_decimal(0.1) == Decimal("0.1")


class TestOrderNumber:
    def test_format(self):
        number = utils.generate_order_number()
        assert re.fullmatch(r"ORD-\d{4}-\d{6}", number)

    def test_uses_last_six_millisecond_digits(self):
        moment = datetime(2025, 3, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)
        millis = int(moment.timestamp() * 1000)

        assert utils.generate_order_number(moment) == f"ORD-2025-{str(millis)[-6:]}"

    def test_prefix_from_settings(self, settings):
        settings.STOREFRONT = {**settings.STOREFRONT, "ORDER_NUMBER_PREFIX": "SHOP"}
        assert utils.generate_order_number().startswith("SHOP-")


class TestStateMachine:
    def test_cancellable_statuses(self):
        assert can_cancel("pending")
        assert can_cancel("processing")
        assert not can_cancel("shipped")

    def test_terminal_statuses(self):
        assert is_terminal("delivered")
        assert is_terminal("refunded")
        assert not is_terminal("shipped")

    def test_refundable_statuses(self):
        assert can_refund("pending")
        assert can_refund("shipped")
        assert can_refund("delivered")
        assert not can_refund("cancelled")
        assert not can_refund("refunded")

    def test_forward_transitions(self):
        assert is_forward_transition("pending", "processing")
        assert is_forward_transition("processing", "cancelled")
        assert not is_forward_transition("pending", "delivered")
        assert not is_forward_transition("shipped", "cancelled")
