"""Tests for RENTAL_PRICING_* settings."""
import pytest
from decimal import Decimal

from django.test import override_settings

from django_rental_pricing import conf
from django_rental_pricing.exceptions import InvalidConfigurationError
from django_rental_pricing.value_objects import RateSchedule


class TestDefaults:
    """Test suite for default settings."""

    def test_defaults(self):
        assert conf.get_currency() == "USD"
        assert conf.get_service_fee_rate() == Decimal("0.12")
        assert conf.get_delivery_fee() == Decimal("50")
        assert conf.get_negotiation_max_rounds() == 10
        assert conf.get_owner_response_delay() == (2.0, 4.0)
        assert conf.get_month_end_start_day() == 25


class TestOverrides:
    """Test suite for settings overrides."""

    @override_settings(RENTAL_PRICING_CURRENCY='eur')
    def test_currency_used_by_listing_schedules(self):
        schedule = RateSchedule.from_listing({'daily_rate': '90'})
        assert schedule.currency == "EUR"

    @override_settings(RENTAL_PRICING_SERVICE_FEE_RATE='0.08', RENTAL_PRICING_DELIVERY_FEE=35)
    def test_fee_overrides(self):
        assert conf.get_service_fee_rate() == Decimal("0.08")
        assert conf.get_delivery_fee() == Decimal("35")

    @override_settings(RENTAL_PRICING_NEGOTIATION_MAX_ROUNDS=None)
    def test_unbounded_negotiation(self):
        assert conf.get_negotiation_max_rounds() is None


class TestInvalidSettings:
    """Test suite for settings validation."""

    @pytest.mark.parametrize("name,value", [
        ('CURRENCY', 'DOLLARS'),
        ('SERVICE_FEE_RATE', '1.5'),
        ('SERVICE_FEE_RATE', 'twelve'),
        ('DELIVERY_FEE', -5),
        ('NEGOTIATION_MAX_ROUNDS', 0),
        ('OWNER_RESPONSE_DELAY', (4, 2)),
        ('OWNER_RESPONSE_DELAY', 3),
        ('MONTH_END_START_DAY', 31),
        ('PROMO_CODES', ['FIRST10']),
    ])
    def test_rejected(self, name, value):
        getter = {
            'CURRENCY': conf.get_currency,
            'SERVICE_FEE_RATE': conf.get_service_fee_rate,
            'DELIVERY_FEE': conf.get_delivery_fee,
            'NEGOTIATION_MAX_ROUNDS': conf.get_negotiation_max_rounds,
            'OWNER_RESPONSE_DELAY': conf.get_owner_response_delay,
            'MONTH_END_START_DAY': conf.get_month_end_start_day,
            'PROMO_CODES': conf.get_promo_codes,
        }[name]
        with override_settings(**{f"RENTAL_PRICING_{name}": value}):
            with pytest.raises(InvalidConfigurationError) as exc_info:
                getter()
        assert exc_info.value.setting_name == name
        assert str(exc_info.value).startswith(f"RENTAL_PRICING_{name}:")
