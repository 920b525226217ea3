"""Tests for the Money value object."""
import pytest
from decimal import Decimal

from django_rental_pricing.exceptions import CurrencyMismatchError
from django_rental_pricing.money import Money


class TestMoneyCreation:
    """Test suite for Money creation and Decimal normalization."""

    def test_float_goes_through_str(self):
        """Floats should convert via str to avoid binary noise."""
        money = Money(19.99, "USD")
        assert money.amount == Decimal("19.99")

    def test_default_currency_is_usd(self):
        assert Money("1").currency == "USD"

    def test_money_is_frozen(self):
        """Money should be immutable."""
        money = Money(Decimal("100"), "USD")
        with pytest.raises(AttributeError):
            money.amount = Decimal("200")

    def test_zero(self):
        assert Money.zero("EUR") == Money("0", "EUR")
        assert Money.zero().is_zero()


class TestMoneyArithmetic:
    """Test suite for currency-aware arithmetic."""

    def test_add_and_subtract(self):
        total = Money("4150", "USD") - Money("830", "USD") + Money("398.40", "USD")
        assert total == Money("3718.40", "USD")

    def test_multiply_by_fraction_keeps_full_precision(self):
        """Multiplication should not round."""
        fee = Money("3320.333", "USD") * Decimal("0.12")
        assert fee.amount == Decimal("398.43996")

    def test_right_multiplication(self):
        assert 3 * Money("450", "USD") == Money("1350", "USD")

    def test_mixed_currency_add_raises(self):
        with pytest.raises(CurrencyMismatchError):
            Money("1", "USD") + Money("1", "EUR")

    def test_mixed_currency_compare_raises(self):
        with pytest.raises(CurrencyMismatchError):
            Money("1", "USD") < Money("2", "EUR")

    def test_multiply_money_by_money_raises(self):
        with pytest.raises(TypeError):
            Money("1", "USD") * Money("2", "USD")

    def test_ordering(self):
        assert Money("10", "USD") < Money("11", "USD")
        assert Money("10", "USD") <= Money("10.00", "USD")
        assert max(Money("3", "USD"), Money("7", "USD")) == Money("7", "USD")


class TestQuantized:
    """Test suite for display rounding."""

    def test_rounds_to_two_decimals(self):
        assert Money("398.4", "USD").quantized().amount == Decimal("398.40")

    def test_uses_bankers_rounding(self):
        """Half rounds to the even neighbour."""
        assert Money("0.125", "USD").quantized().amount == Decimal("0.12")
        assert Money("0.135", "USD").quantized().amount == Decimal("0.14")

    def test_zero_decimal_currency(self):
        assert Money("1234.5", "JPY").quantized().amount == Decimal("1234")

    def test_str_is_display_form(self):
        assert str(Money("5718.4", "USD")) == "5718.40 USD"
