"""Value objects for rental pricing.

Everything here is a frozen dataclass: a new date range or option set
produces a new object, nothing is updated in place.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Iterator

from . import conf
from .exceptions import InvalidConfigurationError, InvalidRateScheduleError
from .money import Money, to_decimal


class RejectionReason(str, Enum):
    """Why an operation declined to produce a result."""

    INVALID_DAY_COUNT = "invalid_day_count"
    INCOMPLETE_RANGE = "incomplete_range"
    DATE_IN_PAST = "date_in_past"
    END_BEFORE_START = "end_before_start"
    BELOW_MIN_RENTAL_DAYS = "below_min_rental_days"
    ABOVE_MAX_RENTAL_DAYS = "above_max_rental_days"
    DATES_UNAVAILABLE = "dates_unavailable"
    PROMO_NOT_FOUND = "promo_not_found"
    PROMO_ALREADY_APPLIED = "promo_already_applied"
    INSURANCE_NOT_FOUND = "insurance_not_found"
    DELIVERY_ADDRESS_REQUIRED = "delivery_address_required"
    RANGE_MISMATCH = "range_mismatch"
    INVALID_OFFER = "invalid_offer"
    SESSION_CLOSED = "session_closed"
    OFFER_IN_FLIGHT = "offer_in_flight"
    INVALID_TOTAL = "invalid_total"
    # Collaborator data the engine cannot price with
    INVALID_RATE_SCHEDULE = "invalid_rate_schedule"
    INVALID_CONFIGURATION = "invalid_configuration"


@dataclass(frozen=True)
class Rejection:
    """
    A declined operation.

    Falsy, so callers can write:

        result = calculate_breakdown(schedule, days)
        if not result:
            show_error(result.reason, result.detail)
    """

    reason: RejectionReason
    detail: str = ""

    def __bool__(self) -> bool:
        return False


def _amount(value, field_name: str, required: bool = True) -> Decimal | None:
    if value is None:
        if required:
            raise InvalidRateScheduleError(f"{field_name} is required")
        return None
    if isinstance(value, bool):
        raise InvalidRateScheduleError(f"{field_name} must be a number, got {value!r}")
    try:
        amount = to_decimal(value)
    except (InvalidOperation, ValueError):
        raise InvalidRateScheduleError(f"{field_name} must be a number, got {value!r}")
    if not amount.is_finite():
        raise InvalidRateScheduleError(f"{field_name} must be finite")
    return amount


def _listing_value(listing: Mapping, key: str, default=None):
    value = listing.get(key)
    if value is None or value == '':
        return default
    return value


@dataclass(frozen=True)
class RateSchedule:
    """
    Rates and rental window of one equipment listing.

    Fields:
    - daily_rate: price per day (> 0)
    - weekly_rate / monthly_rate: optional block prices for 7 / 30 days
    - deposit_amount: refundable hold, never discounted (>= 0)
    - min_rental_days / max_rental_days: allowed rental length, inclusive
    - currency: ISO 4217 code every amount is expressed in

    Invalid data raises InvalidRateScheduleError at construction, so a
    broken listing is rejected before any calculation runs. Listing
    records should go through from_listing(), which returns a Rejection
    instead of raising.
    """

    daily_rate: Decimal
    deposit_amount: Decimal = Decimal("0")
    weekly_rate: Decimal | None = None
    monthly_rate: Decimal | None = None
    min_rental_days: int = 1
    max_rental_days: int = 90
    currency: str = "USD"

    def __post_init__(self):
        object.__setattr__(self, 'daily_rate', _amount(self.daily_rate, 'daily_rate'))
        object.__setattr__(self, 'deposit_amount', _amount(self.deposit_amount, 'deposit_amount'))
        object.__setattr__(self, 'weekly_rate', _amount(self.weekly_rate, 'weekly_rate', required=False))
        object.__setattr__(self, 'monthly_rate', _amount(self.monthly_rate, 'monthly_rate', required=False))

        if self.daily_rate <= 0:
            raise InvalidRateScheduleError("daily_rate must be positive")
        for name in ('weekly_rate', 'monthly_rate'):
            rate = getattr(self, name)
            if rate is not None and rate <= 0:
                raise InvalidRateScheduleError(f"{name} must be positive when set")
        if self.deposit_amount < 0:
            raise InvalidRateScheduleError("deposit_amount must not be negative")

        for name in ('min_rental_days', 'max_rental_days'):
            days = getattr(self, name)
            if isinstance(days, bool) or not isinstance(days, int) or days < 1:
                raise InvalidRateScheduleError(f"{name} must be a positive integer")
        if self.min_rental_days > self.max_rental_days:
            raise InvalidRateScheduleError(
                f"min_rental_days ({self.min_rental_days}) exceeds "
                f"max_rental_days ({self.max_rental_days})"
            )

    @classmethod
    def from_listing(cls, listing: Mapping, currency: str | None = None) -> 'RateSchedule | Rejection':
        """
        Build a schedule from a listing record.

        Only absent or blank fields take defaults. Explicit values, zero
        included, go through validation.

        Args:
            listing: Mapping with daily_rate, deposit_amount and optional
                weekly_rate, monthly_rate, min_rental_days, max_rental_days
            currency: Currency of the amounts (defaults to RENTAL_PRICING_CURRENCY)

        Returns:
            RateSchedule, or a Rejection (INVALID_RATE_SCHEDULE or
            INVALID_CONFIGURATION) when the listing can't be priced.
        """
        try:
            if 'daily_rate' not in listing:
                raise InvalidRateScheduleError("listing is missing daily_rate")
            return cls(
                daily_rate=listing['daily_rate'],
                deposit_amount=_listing_value(listing, 'deposit_amount', 0),
                weekly_rate=_listing_value(listing, 'weekly_rate'),
                monthly_rate=_listing_value(listing, 'monthly_rate'),
                min_rental_days=_listing_value(listing, 'min_rental_days', 1),
                max_rental_days=_listing_value(listing, 'max_rental_days', 90),
                currency=currency or conf.get_currency(),
            )
        except InvalidRateScheduleError as e:
            return Rejection(RejectionReason.INVALID_RATE_SCHEDULE, str(e))
        except InvalidConfigurationError as e:
            return Rejection(RejectionReason.INVALID_CONFIGURATION, str(e))

    def money(self, amount) -> Money:
        """Wrap an amount in this schedule's currency."""
        return Money(amount, self.currency)

    def allows(self, day_count: int) -> bool:
        """Check if a rental of day_count days fits the rental window."""
        return self.min_rental_days <= day_count <= self.max_rental_days


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range."""

    start: date
    end: date

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"end ({self.end}) is before start ({self.start})")

    @property
    def day_count(self) -> int:
        return (self.end - self.start).days + 1

    def days(self) -> Iterator[date]:
        for offset in range(self.day_count):
            yield self.start + timedelta(days=offset)

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class PromoCode:
    """A resolvable promo code."""

    code: str
    discount_fraction: Decimal

    def __post_init__(self):
        object.__setattr__(self, 'code', self.code.strip().upper())
        try:
            fraction = to_decimal(self.discount_fraction)
        except (InvalidOperation, ValueError):
            raise InvalidConfigurationError('PROMO_CODES', f"{self.code}: not a number")
        if not Decimal("0") < fraction < Decimal("1"):
            raise InvalidConfigurationError(
                'PROMO_CODES', f"{self.code}: discount must be between 0 and 1"
            )
        object.__setattr__(self, 'discount_fraction', fraction)


@dataclass(frozen=True)
class InsurancePlan:
    """Damage/theft protection sold as a fraction of the discounted base."""

    id: str
    name: str
    rate: Decimal
    coverage: Decimal
    features: tuple[str, ...] = ()

    def __post_init__(self):
        try:
            object.__setattr__(self, 'rate', to_decimal(self.rate))
            object.__setattr__(self, 'coverage', to_decimal(self.coverage))
        except (InvalidOperation, ValueError):
            raise InvalidConfigurationError('INSURANCE_PLANS', f"{self.id}: rate and coverage must be numbers")
        if not Decimal("0") <= self.rate < Decimal("1"):
            raise InvalidConfigurationError('INSURANCE_PLANS', f"{self.id}: rate must be in [0, 1)")
        object.__setattr__(self, 'features', tuple(self.features))

    @classmethod
    def from_dict(cls, data: Mapping) -> 'InsurancePlan':
        try:
            return cls(
                id=data['id'],
                name=data['name'],
                rate=data['rate'],
                coverage=data['coverage'],
                features=data.get('features', ()),
            )
        except KeyError as e:
            raise InvalidConfigurationError('INSURANCE_PLANS', f"plan is missing {e.args[0]!r}")


@dataclass(frozen=True)
class RateQuote:
    """Output of the rate calculator."""

    day_count: int
    tier: str  # 'daily' | 'weekly' | 'monthly'
    gross_price: Money
    base_price: Money
    duration_discount: Money


@dataclass(frozen=True)
class PricingBreakdown:
    """
    Itemized price of one rental.

    Amounts keep full precision; call quantized() or as_display() to round
    for presentation.

    total = gross_price - duration_discount - promo_discount
            + insurance_amount + delivery_fee + service_fee + deposit
    """

    day_count: int
    gross_price: Money
    base_price: Money
    duration_discount: Money
    promo_discount: Money
    insurance_amount: Money
    delivery_fee: Money
    service_fee: Money
    deposit: Money
    total: Money
    tier: str = "daily"
    promo_code: str | None = None
    insurance_plan: InsurancePlan | None = None
    delivery: bool = False

    @property
    def currency(self) -> str:
        return self.total.currency

    @property
    def discounted_base(self) -> Money:
        """Base price after duration and promo discounts."""
        return self.base_price - self.promo_discount

    @property
    def savings(self) -> Money:
        return self.duration_discount + self.promo_discount

    @property
    def rental_charges(self) -> Money:
        """Everything except the refundable deposit."""
        return self.total - self.deposit

    def quantized(self) -> 'PricingBreakdown':
        """Copy with every amount rounded to the currency's precision."""
        rounded = {
            name: getattr(self, name).quantized()
            for name in MONEY_FIELDS
        }
        return PricingBreakdown(
            day_count=self.day_count,
            tier=self.tier,
            promo_code=self.promo_code,
            insurance_plan=self.insurance_plan,
            delivery=self.delivery,
            **rounded,
        )

    def as_display(self) -> dict:
        """Two-decimal strings keyed by field name, for rendering."""
        display = {
            name: str(getattr(self, name).quantized().amount)
            for name in MONEY_FIELDS
        }
        display.update(
            day_count=self.day_count,
            currency=self.currency,
            promo_code=self.promo_code,
            insurance_plan=self.insurance_plan.id if self.insurance_plan else None,
        )
        return display


MONEY_FIELDS = (
    'gross_price', 'base_price', 'duration_discount', 'promo_discount',
    'insurance_amount', 'delivery_fee', 'service_fee', 'deposit', 'total',
)


@dataclass(frozen=True)
class BookingDetails:
    """
    Booking record handed to the persistence collaborator.

    negotiated_total is set when a negotiation settled below the
    breakdown's total; amount_due reflects it.
    """

    equipment_id: str
    start_date: date
    end_date: date
    total_days: int
    pricing: PricingBreakdown
    delivery: bool = False
    delivery_address: str | None = None
    notes: str | None = None
    negotiated_total: Money | None = None

    @property
    def insurance(self) -> InsurancePlan | None:
        return self.pricing.insurance_plan

    @property
    def promo_code(self) -> str | None:
        return self.pricing.promo_code

    @property
    def amount_due(self) -> Money:
        if self.negotiated_total is not None:
            return self.negotiated_total
        return self.pricing.total

    def to_dict(self) -> dict:
        """JSON-ready snapshot of the booking."""
        data = {
            'equipment_id': self.equipment_id,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'total_days': self.total_days,
            'delivery': self.delivery,
            'delivery_address': self.delivery_address,
            'notes': self.notes,
            'promo_code': self.promo_code,
            'insurance': self.insurance.id if self.insurance else None,
            'negotiated_total': (
                str(self.negotiated_total.quantized().amount)
                if self.negotiated_total is not None else None
            ),
            'amount_due': str(self.amount_due.quantized().amount),
            'currency': self.pricing.currency,
        }
        for name in MONEY_FIELDS:
            data[name] = str(getattr(self.pricing, name).quantized().amount)
        return data
