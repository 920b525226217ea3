"""Tests for promo codes and insurance plans."""
import pytest
from decimal import Decimal

from django.test import override_settings

from django_rental_pricing.exceptions import InvalidConfigurationError
from django_rental_pricing.insurance import get_insurance_plan, get_insurance_plans
from django_rental_pricing.money import Money
from django_rental_pricing.promotions import PromoSlot, lookup_promo, promo_discount
from django_rental_pricing.value_objects import PromoCode, Rejection, RejectionReason


class TestLookupPromo:
    """Test suite for lookup_promo()."""

    def test_default_codes(self):
        assert lookup_promo("FIRST10").discount_fraction == Decimal("0.10")
        assert lookup_promo("SUMMER20").discount_fraction == Decimal("0.20")
        assert lookup_promo("WEEKEND15").discount_fraction == Decimal("0.15")

    def test_case_and_whitespace_ignored(self):
        assert lookup_promo("  summer20 ").code == "SUMMER20"

    @pytest.mark.parametrize("code", ["NOPE", "", None, 20, "SUMMER 20"])
    def test_unknown_or_malformed(self, code):
        assert lookup_promo(code) is None

    def test_explicit_table(self):
        table = {"VIP": PromoCode("vip", "0.3")}
        assert lookup_promo("vip", table).discount_fraction == Decimal("0.3")
        assert lookup_promo("SUMMER20", table) is None

    @override_settings(RENTAL_PRICING_PROMO_CODES={'spring25': '0.25'})
    def test_codes_from_settings(self):
        assert lookup_promo("SPRING25").discount_fraction == Decimal("0.25")
        assert lookup_promo("SUMMER20") is None

    @override_settings(RENTAL_PRICING_PROMO_CODES={'FREE': '1'})
    def test_full_discount_is_misconfiguration(self):
        with pytest.raises(InvalidConfigurationError):
            lookup_promo("FREE")

    def test_promo_discount(self):
        assert promo_discount("FIRST10", Money("4150", "USD")) == Money("415", "USD")

    def test_promo_discount_unknown(self):
        result = promo_discount("BOGUS", Money("4150", "USD"))
        assert isinstance(result, Rejection)
        assert result.reason == RejectionReason.PROMO_NOT_FOUND

    @override_settings(RENTAL_PRICING_PROMO_CODES={'FREE': '1'})
    def test_promo_discount_with_malformed_table(self):
        result = promo_discount("FREE", Money("4150", "USD"))
        assert isinstance(result, Rejection)
        assert result.reason == RejectionReason.INVALID_CONFIGURATION


class TestPromoSlot:
    """Test suite for the one-promo-per-run slot."""

    def test_apply_once(self):
        slot = PromoSlot()
        promo = slot.apply("summer20")
        assert promo.code == "SUMMER20"
        assert slot.active == promo

    def test_second_code_rejected(self):
        slot = PromoSlot()
        slot.apply("SUMMER20")
        result = slot.apply("FIRST10")

        assert result.reason == RejectionReason.PROMO_ALREADY_APPLIED
        assert slot.active.code == "SUMMER20"

    def test_unknown_code_leaves_slot_empty(self):
        slot = PromoSlot()
        result = slot.apply("BOGUS")
        assert result.reason == RejectionReason.PROMO_NOT_FOUND
        assert slot.active is None

    def test_clear_allows_new_code(self):
        slot = PromoSlot()
        slot.apply("SUMMER20")
        slot.clear()
        assert slot.apply("FIRST10").code == "FIRST10"

    @override_settings(RENTAL_PRICING_PROMO_CODES=['FIRST10'])
    def test_malformed_table_leaves_slot_empty(self):
        slot = PromoSlot()
        result = slot.apply("FIRST10")

        assert result.reason == RejectionReason.INVALID_CONFIGURATION
        assert slot.active is None


class TestInsurancePlans:
    """Test suite for the insurance catalog."""

    def test_default_plans_in_order(self):
        plans = get_insurance_plans()
        assert [plan.id for plan in plans] == ["basic", "standard", "premium"]
        assert [plan.rate for plan in plans] == [Decimal("0.05"), Decimal("0.10"), Decimal("0.15")]

    def test_get_plan(self):
        plan = get_insurance_plan("premium")
        assert plan.coverage == Decimal("10000")
        assert "Full damage coverage" in plan.features

    def test_unknown_plan(self):
        assert get_insurance_plan("platinum") is None

    @override_settings(RENTAL_PRICING_INSURANCE_PLANS=[{'id': 'basic', 'name': 'Basic'}])
    def test_plan_missing_rate(self):
        with pytest.raises(InvalidConfigurationError):
            get_insurance_plans()
