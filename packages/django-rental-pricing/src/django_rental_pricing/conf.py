"""Django Rental Pricing configuration.

All settings can be overridden in your Django settings.py. Values are read
when a calculation runs, so override_settings() takes effect immediately.

Example:
    # settings.py
    RENTAL_PRICING_CURRENCY = 'EUR'
    RENTAL_PRICING_DELIVERY_FEE = '35.00'
    RENTAL_PRICING_PROMO_CODES = {'SPRING25': '0.25'}
    RENTAL_PRICING_NEGOTIATION_MAX_ROUNDS = 6
"""

from decimal import Decimal, InvalidOperation

from django.conf import settings

from .exceptions import InvalidConfigurationError


# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_CURRENCY = 'USD'

# Platform fee charged on the discounted base price
DEFAULT_SERVICE_FEE_RATE = Decimal('0.12')

# Flat fee when the renter chooses delivery instead of self-pickup
DEFAULT_DELIVERY_FEE = Decimal('50')

DEFAULT_PROMO_CODES = {
    'FIRST10': Decimal('0.10'),
    'SUMMER20': Decimal('0.20'),
    'WEEKEND15': Decimal('0.15'),
}

DEFAULT_INSURANCE_PLANS = [
    {
        'id': 'basic',
        'name': 'Basic Protection',
        'rate': '0.05',
        'coverage': '1000',
        'features': ['Accidental damage up to $1,000', 'Theft protection', '24/7 support'],
    },
    {
        'id': 'standard',
        'name': 'Standard Protection',
        'rate': '0.10',
        'coverage': '5000',
        'features': [
            'Accidental damage up to $5,000', 'Theft protection',
            'No deductible', 'Lost item coverage',
        ],
    },
    {
        'id': 'premium',
        'name': 'Premium Protection',
        'rate': '0.15',
        'coverage': '10000',
        'features': [
            'Full damage coverage', 'Theft protection', 'No deductible',
            'Lost item coverage', 'Rental extension included',
        ],
    },
]

# None disables the cap
DEFAULT_NEGOTIATION_MAX_ROUNDS = 10

# Seconds (min, max) the simulated owner takes to answer an offer
DEFAULT_OWNER_RESPONSE_DELAY = (2.0, 4.0)

# Day of month from which weekdays get the month-end bonus discount
DEFAULT_MONTH_END_START_DAY = 25


def get_setting(name: str, default=None):
    """Get a setting with RENTAL_PRICING_ prefix."""
    return getattr(settings, f"RENTAL_PRICING_{name}", default)


def _decimal_setting(name: str, default: Decimal) -> Decimal:
    value = get_setting(name, default)
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidConfigurationError(name, f"{value!r} is not a number")


def get_currency() -> str:
    currency = get_setting('CURRENCY', DEFAULT_CURRENCY)
    if not isinstance(currency, str) or len(currency) != 3:
        raise InvalidConfigurationError('CURRENCY', f"{currency!r} is not an ISO 4217 code")
    return currency.upper()


def get_service_fee_rate() -> Decimal:
    rate = _decimal_setting('SERVICE_FEE_RATE', DEFAULT_SERVICE_FEE_RATE)
    if not Decimal('0') <= rate < Decimal('1'):
        raise InvalidConfigurationError('SERVICE_FEE_RATE', "must be in [0, 1)")
    return rate


def get_delivery_fee() -> Decimal:
    fee = _decimal_setting('DELIVERY_FEE', DEFAULT_DELIVERY_FEE)
    if fee < 0:
        raise InvalidConfigurationError('DELIVERY_FEE', "must not be negative")
    return fee


def get_promo_codes() -> dict:
    """Raw promo table: code -> discount fraction."""
    codes = get_setting('PROMO_CODES', DEFAULT_PROMO_CODES)
    if not isinstance(codes, dict):
        raise InvalidConfigurationError('PROMO_CODES', "must be a dict of code -> fraction")
    return codes


def get_insurance_plans() -> list:
    """Raw insurance plan definitions (list of dicts)."""
    plans = get_setting('INSURANCE_PLANS', DEFAULT_INSURANCE_PLANS)
    if not isinstance(plans, (list, tuple)):
        raise InvalidConfigurationError('INSURANCE_PLANS', "must be a list of plan dicts")
    return list(plans)


def get_negotiation_max_rounds() -> int | None:
    max_rounds = get_setting('NEGOTIATION_MAX_ROUNDS', DEFAULT_NEGOTIATION_MAX_ROUNDS)
    if max_rounds is None:
        return None
    if isinstance(max_rounds, bool) or not isinstance(max_rounds, int) or max_rounds < 1:
        raise InvalidConfigurationError('NEGOTIATION_MAX_ROUNDS', "must be a positive int or None")
    return max_rounds


def get_owner_response_delay() -> tuple[float, float]:
    delay = get_setting('OWNER_RESPONSE_DELAY', DEFAULT_OWNER_RESPONSE_DELAY)
    try:
        low, high = (float(bound) for bound in delay)
    except (TypeError, ValueError):
        raise InvalidConfigurationError('OWNER_RESPONSE_DELAY', "must be a (min, max) pair of seconds")
    if low < 0 or high < low:
        raise InvalidConfigurationError('OWNER_RESPONSE_DELAY', "requires 0 <= min <= max")
    return low, high


def get_month_end_start_day() -> int:
    day = get_setting('MONTH_END_START_DAY', DEFAULT_MONTH_END_START_DAY)
    if isinstance(day, bool) or not isinstance(day, int) or not 1 <= day <= 28:
        raise InvalidConfigurationError('MONTH_END_START_DAY', "must be an int between 1 and 28")
    return day


# =============================================================================
# SETTINGS REFERENCE
# =============================================================================

# RENTAL_PRICING_CURRENCY = 'USD'
# RENTAL_PRICING_SERVICE_FEE_RATE = '0.12'
# RENTAL_PRICING_DELIVERY_FEE = '50'
# RENTAL_PRICING_PROMO_CODES = {'FIRST10': '0.10', ...}
# RENTAL_PRICING_INSURANCE_PLANS = [{'id': 'basic', 'name': ..., 'rate': '0.05', ...}]
# RENTAL_PRICING_NEGOTIATION_MAX_ROUNDS = 10  # None = unbounded
# RENTAL_PRICING_OWNER_RESPONSE_DELAY = (2.0, 4.0)
# RENTAL_PRICING_MONTH_END_START_DAY = 25
