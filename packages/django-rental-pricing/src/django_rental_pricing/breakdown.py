"""Pricing breakdown assembly and booking record construction.

Composition order:
1. Tiered base price (rates.calculate_base_price)
2. Promo discount on the duration-discounted base
3. Insurance as a fraction of the discounted base
4. Flat delivery fee when delivery is chosen
5. Service fee (RENTAL_PRICING_SERVICE_FEE_RATE) on the discounted base
6. Deposit, unchanged

Amounts are never rounded here; PricingBreakdown.quantized() rounds for
display.
"""

import logging

from . import conf
from .availability import check_rental_length
from .exceptions import InvalidConfigurationError
from .insurance import get_insurance_plan
from .money import Money
from .promotions import lookup_promo
from .rates import calculate_base_price
from .value_objects import (
    BookingDetails,
    DateRange,
    InsurancePlan,
    PricingBreakdown,
    PromoCode,
    RateSchedule,
    Rejection,
    RejectionReason,
)


logger = logging.getLogger(__name__)


def _resolve_promo(promo, promo_table) -> PromoCode | Rejection | None:
    if promo is None or isinstance(promo, PromoCode):
        return promo
    resolved = lookup_promo(promo, promo_table)
    if resolved is None:
        return Rejection(RejectionReason.PROMO_NOT_FOUND, f"unknown promo code {promo!r}")
    return resolved


def _resolve_insurance(insurance) -> InsurancePlan | Rejection | None:
    if insurance is None or isinstance(insurance, InsurancePlan):
        return insurance
    plan = get_insurance_plan(insurance)
    if plan is None:
        return Rejection(RejectionReason.INSURANCE_NOT_FOUND, f"unknown insurance plan {insurance!r}")
    return plan


def calculate_breakdown(
    schedule: RateSchedule,
    day_count: int,
    *,
    promo: PromoCode | str | None = None,
    insurance: InsurancePlan | str | None = None,
    delivery: bool = False,
    promo_table: dict[str, PromoCode] | None = None,
) -> PricingBreakdown | Rejection:
    """
    Build the itemized price of a rental.

    Args:
        schedule: The listing's rate schedule
        day_count: Inclusive rental length in days
        promo: A resolved PromoCode or a code to look up
        insurance: An InsurancePlan or a plan id from the catalog
        delivery: True for delivery, False for self-pickup
        promo_table: Promo table override (defaults to settings)

    Returns:
        PricingBreakdown, or a Rejection when the day count is outside the
        listing's rental window, the promo/insurance can't be resolved, or
        a RENTAL_PRICING_* setting is malformed (INVALID_CONFIGURATION).

    Usage:
        breakdown = calculate_breakdown(schedule, 10, promo="SUMMER20")
        breakdown.quantized().total  # Money('5718.40', 'USD')
    """
    quote = calculate_base_price(schedule, day_count)
    if isinstance(quote, Rejection):
        return quote

    rejection = check_rental_length(day_count, schedule)
    if rejection is not None:
        return rejection

    try:
        promo = _resolve_promo(promo, promo_table)
        plan = _resolve_insurance(insurance)
        delivery_rate = conf.get_delivery_fee()
        service_fee_rate = conf.get_service_fee_rate()
    except InvalidConfigurationError as e:
        logger.warning(f"Cannot price {day_count} days: {e}")
        return Rejection(RejectionReason.INVALID_CONFIGURATION, str(e))

    if isinstance(promo, Rejection):
        return promo
    if isinstance(plan, Rejection):
        return plan

    zero = Money.zero(schedule.currency)

    promo_discount = quote.base_price * promo.discount_fraction if promo else zero
    discounted_base = quote.base_price - promo_discount

    insurance_amount = discounted_base * plan.rate if plan else zero
    delivery_fee = schedule.money(delivery_rate) if delivery else zero
    service_fee = discounted_base * service_fee_rate
    deposit = schedule.money(schedule.deposit_amount)

    total = (
        quote.gross_price
        - quote.duration_discount
        - promo_discount
        + insurance_amount
        + delivery_fee
        + service_fee
        + deposit
    )

    logger.debug(
        f"Breakdown for {day_count} days: base={quote.base_price} "
        f"promo={promo_discount} service={service_fee} total={total}"
    )

    return PricingBreakdown(
        day_count=day_count,
        gross_price=quote.gross_price,
        base_price=quote.base_price,
        duration_discount=quote.duration_discount,
        promo_discount=promo_discount,
        insurance_amount=insurance_amount,
        delivery_fee=delivery_fee,
        service_fee=service_fee,
        deposit=deposit,
        total=total,
        tier=quote.tier,
        promo_code=promo.code if promo else None,
        insurance_plan=plan,
        delivery=delivery,
    )


def price_range(schedule: RateSchedule, date_range: DateRange, **options) -> PricingBreakdown | Rejection:
    """Price a validated DateRange. Options as calculate_breakdown()."""
    return calculate_breakdown(schedule, date_range.day_count, **options)


def build_booking_details(
    equipment_id,
    date_range: DateRange,
    pricing: PricingBreakdown,
    *,
    delivery_address: str | None = None,
    notes: str | None = None,
    negotiated_total: Money | None = None,
) -> BookingDetails | Rejection:
    """
    Assemble the booking record for the persistence collaborator.

    Args:
        equipment_id: Listing identifier
        date_range: The validated rental range
        pricing: Breakdown computed for that range
        delivery_address: Required when pricing.delivery is True
        notes: Free-form renter notes
        negotiated_total: Agreed amount from a negotiation, if any

    Returns:
        BookingDetails, or a Rejection if the parts don't fit together.
    """
    if pricing.day_count != date_range.day_count:
        return Rejection(
            RejectionReason.RANGE_MISMATCH,
            f"breakdown covers {pricing.day_count} days, range covers {date_range.day_count}",
        )

    address = (delivery_address or "").strip() or None
    if pricing.delivery and address is None:
        return Rejection(RejectionReason.DELIVERY_ADDRESS_REQUIRED, "delivery needs an address")

    if negotiated_total is not None:
        if negotiated_total.currency != pricing.currency:
            return Rejection(
                RejectionReason.INVALID_OFFER,
                f"negotiated total is in {negotiated_total.currency}, pricing in {pricing.currency}",
            )
        if not negotiated_total.is_positive() or negotiated_total > pricing.total:
            return Rejection(
                RejectionReason.INVALID_OFFER,
                f"negotiated total {negotiated_total} is outside (0, {pricing.total}]",
            )

    return BookingDetails(
        equipment_id=str(equipment_id),
        start_date=date_range.start,
        end_date=date_range.end,
        total_days=date_range.day_count,
        pricing=pricing,
        delivery=pricing.delivery,
        delivery_address=address if pricing.delivery else None,
        notes=(notes or "").strip() or None,
        negotiated_total=negotiated_total,
    )
