"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from shopsync.domain.exceptions import ValidationError
from shopsync.domain.model.value_objects import Money, Quantity


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "INR"

    def test_of_factory_from_sheet_cell(self):
        assert Money.of("1,250.50").amount == Decimal("1250.50")

    def test_of_factory_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("abc")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_addition(self):
        assert Money.of("10") + Money.of("5.50") == Money.of("15.50")

    def test_multiplication_by_fractional_quantity(self):
        assert Money.of("60") * 1.5 == Money.of("90.00")

    def test_multiplication_rounds_half_up(self):
        assert Money.of("0.15") * 0.5 == Money.of("0.08")

    def test_multiplication_by_non_number_rejected(self):
        with pytest.raises(TypeError):
            Money.of("1") * "2"

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "INR") + Money(Decimal("5"), "USD")

    def test_str_formatting(self):
        assert str(Money.of("15")) == "₹15.00"


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_fractional_quantity(self):
        assert Quantity(1.5).value == 1.5

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(0)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(-3)

    def test_str(self):
        assert str(Quantity(2.0)) == "2"
