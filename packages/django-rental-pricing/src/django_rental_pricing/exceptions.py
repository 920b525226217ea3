"""Exceptions for django-rental-pricing.

Routine rejections (bad offers, out-of-window dates, unknown promo codes)
are returned as Rejection values, not raised. These exceptions cover data
handed to the engine by a collaborator that cannot be priced at all.
"""


class RentalPricingError(Exception):
    """Base exception for rental pricing errors."""
    pass


class InvalidRateScheduleError(RentalPricingError, ValueError):
    """Raised when a listing's rate schedule is missing or malformed."""
    pass


class InvalidConfigurationError(RentalPricingError, ValueError):
    """Raised when a RENTAL_PRICING_* setting cannot be used."""

    def __init__(self, setting_name, message):
        self.setting_name = setting_name
        super().__init__(f"RENTAL_PRICING_{setting_name}: {message}")


class CurrencyMismatchError(RentalPricingError, ValueError):
    """Raised when attempting arithmetic between different currencies."""
    pass
