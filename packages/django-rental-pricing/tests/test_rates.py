"""Tests for RateSchedule and the tiered rate calculator."""
import pytest
from decimal import Decimal

from django.test import override_settings

from django_rental_pricing.exceptions import InvalidRateScheduleError
from django_rental_pricing.money import Money
from django_rental_pricing.rates import calculate_base_price
from django_rental_pricing.value_objects import RateSchedule, Rejection, RejectionReason


class TestRateSchedule:
    """Test suite for RateSchedule validation."""

    def test_amounts_normalized_to_decimal(self):
        schedule = RateSchedule(daily_rate=450, weekly_rate="2800", deposit_amount=2000.0)
        assert schedule.daily_rate == Decimal("450")
        assert schedule.weekly_rate == Decimal("2800")
        assert schedule.deposit_amount == Decimal("2000.0")

    @pytest.mark.parametrize("daily_rate", [0, -10, "abc", None, True])
    def test_bad_daily_rate_rejected(self, daily_rate):
        with pytest.raises(InvalidRateScheduleError):
            RateSchedule(daily_rate=daily_rate)

    def test_negative_deposit_rejected(self):
        with pytest.raises(InvalidRateScheduleError):
            RateSchedule(daily_rate=100, deposit_amount=-1)

    def test_min_above_max_rejected(self):
        with pytest.raises(InvalidRateScheduleError):
            RateSchedule(daily_rate=100, min_rental_days=10, max_rental_days=5)

    def test_non_positive_weekly_rate_rejected(self):
        with pytest.raises(InvalidRateScheduleError):
            RateSchedule(daily_rate=100, weekly_rate=0)

    def test_from_listing(self):
        """Listing records use snake_case keys; empty tiers mean no tier."""
        schedule = RateSchedule.from_listing({
            'daily_rate': '120',
            'weekly_rate': None,
            'monthly_rate': '2500',
            'deposit_amount': '300',
            'min_rental_days': 2,
            'max_rental_days': 45,
        })
        assert schedule.weekly_rate is None
        assert schedule.monthly_rate == Decimal("2500")
        assert schedule.min_rental_days == 2
        assert schedule.currency == "USD"

    def test_from_listing_blank_tier_means_no_tier(self):
        schedule = RateSchedule.from_listing({'daily_rate': '120', 'weekly_rate': ''})
        assert schedule.weekly_rate is None
        assert schedule.min_rental_days == 1
        assert schedule.max_rental_days == 90

    def test_from_listing_without_daily_rate(self):
        result = RateSchedule.from_listing({'deposit_amount': 100})
        assert isinstance(result, Rejection)
        assert result.reason == RejectionReason.INVALID_RATE_SCHEDULE

    def test_from_listing_with_unparseable_rate(self):
        """A bad listing record comes back as a value, not an exception."""
        result = RateSchedule.from_listing({'daily_rate': 'abc'}, currency="USD")
        assert isinstance(result, Rejection)
        assert result.reason == RejectionReason.INVALID_RATE_SCHEDULE
        assert 'daily_rate' in result.detail

    @pytest.mark.parametrize("field", ['min_rental_days', 'max_rental_days', 'weekly_rate'])
    def test_from_listing_explicit_zero_is_validated(self, field):
        result = RateSchedule.from_listing({'daily_rate': '120', field: 0})
        assert isinstance(result, Rejection)
        assert result.reason == RejectionReason.INVALID_RATE_SCHEDULE

    @override_settings(RENTAL_PRICING_CURRENCY="dollars")
    def test_from_listing_with_bad_currency_setting(self):
        result = RateSchedule.from_listing({'daily_rate': '120'})
        assert isinstance(result, Rejection)
        assert result.reason == RejectionReason.INVALID_CONFIGURATION


class TestCalculateBasePrice:
    """Test suite for calculate_base_price()."""

    def test_weekly_tier_with_leftover_days(self):
        """450/day, 2800/week, 10 days -> 2800 + 3 * 450 = 4150."""
        schedule = RateSchedule(daily_rate=450, weekly_rate=2800)
        quote = calculate_base_price(schedule, 10)

        assert quote.tier == "weekly"
        assert quote.base_price == Money("4150", "USD")
        assert quote.duration_discount == Money("350", "USD")
        assert quote.gross_price == Money("4500", "USD")

    def test_short_rental_uses_daily_rate(self, schedule):
        quote = calculate_base_price(schedule, 6)
        assert quote.tier == "daily"
        assert quote.base_price == Money("2700", "USD")
        assert quote.duration_discount.is_zero()

    def test_monthly_tier_wins_from_30_days(self, schedule):
        """37 days -> one month + 7 days at the daily rate (not weekly)."""
        quote = calculate_base_price(schedule, 37)
        assert quote.tier == "monthly"
        assert quote.base_price == Money(10000 + 7 * 450, "USD")

    def test_weekly_used_when_no_monthly_rate(self):
        schedule = RateSchedule(daily_rate=100, weekly_rate=600)
        quote = calculate_base_price(schedule, 31)
        assert quote.tier == "weekly"
        assert quote.base_price == Money(4 * 600 + 3 * 100, "USD")

    def test_no_tiers_is_naive_total(self):
        schedule = RateSchedule(daily_rate=75)
        quote = calculate_base_price(schedule, 45)
        assert quote.base_price == Money(45 * 75, "USD")
        assert quote.duration_discount.is_zero()

    @pytest.mark.parametrize("day_count", range(30, 61))
    def test_monthly_never_exceeds_naive_total(self, schedule, day_count):
        quote = calculate_base_price(schedule, day_count)
        assert quote.base_price <= quote.gross_price
        assert quote.base_price < Money(day_count * 450, "USD")

    @pytest.mark.parametrize("day_count", [0, -3, 2.5, "7", None])
    def test_invalid_day_count(self, schedule, day_count):
        result = calculate_base_price(schedule, day_count)
        assert isinstance(result, Rejection)
        assert result.reason == RejectionReason.INVALID_DAY_COUNT
        assert not result

    def test_quote_in_schedule_currency(self):
        schedule = RateSchedule(daily_rate=90, currency="EUR")
        assert calculate_base_price(schedule, 2).base_price.currency == "EUR"
