"""Django Rental Pricing - rental price calculation and negotiation.

Calculators (pure, safe to call concurrently):
    calculate_base_price: Tiered daily/weekly/monthly rate
    validate_range / DateSelection: Rental date checks and two-click picker
    lookup_promo / PromoSlot: Promo codes, one per pricing run
    calculate_breakdown / price_range: Itemized total
    build_booking_details: Booking record for persistence
    DemandScheduler: Discount calendar and recommended windows

Stateful:
    NegotiationSession / Negotiator: Offer and counter-offer protocol
"""

__version__ = "0.1.0"

__all__ = [
    # Value objects
    "Money",
    "RateSchedule",
    "DateRange",
    "PromoCode",
    "InsurancePlan",
    "PricingBreakdown",
    "BookingDetails",
    "Rejection",
    "RejectionReason",
    # Calculators
    "calculate_base_price",
    "validate_range",
    "DateSelection",
    "lookup_promo",
    "PromoSlot",
    "calculate_breakdown",
    "price_range",
    "build_booking_details",
    "DemandScheduler",
    # Negotiation
    "NegotiationSession",
    "Negotiator",
    "decide_owner_response",
    # Exceptions
    "RentalPricingError",
    "InvalidRateScheduleError",
    "InvalidConfigurationError",
    "CurrencyMismatchError",
]

_EXPORTS = {
    "Money": "money",
    "RateSchedule": "value_objects",
    "DateRange": "value_objects",
    "PromoCode": "value_objects",
    "InsurancePlan": "value_objects",
    "PricingBreakdown": "value_objects",
    "BookingDetails": "value_objects",
    "Rejection": "value_objects",
    "RejectionReason": "value_objects",
    "calculate_base_price": "rates",
    "validate_range": "availability",
    "DateSelection": "availability",
    "lookup_promo": "promotions",
    "PromoSlot": "promotions",
    "calculate_breakdown": "breakdown",
    "price_range": "breakdown",
    "build_booking_details": "breakdown",
    "DemandScheduler": "scheduling",
    "NegotiationSession": "negotiation",
    "Negotiator": "negotiation",
    "decide_owner_response": "negotiation",
    "RentalPricingError": "exceptions",
    "InvalidRateScheduleError": "exceptions",
    "InvalidConfigurationError": "exceptions",
    "CurrencyMismatchError": "exceptions",
}


def __getattr__(name):
    """Lazy import to avoid AppRegistryNotReady errors."""
    if name in _EXPORTS:
        import importlib
        module = importlib.import_module(f"{__name__}.{_EXPORTS[name]}")
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
