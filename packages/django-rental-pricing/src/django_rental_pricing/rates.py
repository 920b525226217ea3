"""Tiered rate calculation.

The coarsest tier the rental qualifies for wins: whole 30-day blocks at the
monthly rate, else whole 7-day blocks at the weekly rate, with leftover days
at the daily rate.
"""

import logging

from .value_objects import RateQuote, RateSchedule, Rejection, RejectionReason


logger = logging.getLogger(__name__)

# (block length in days, RateSchedule attribute, tier name), coarsest first
RATE_TIERS = (
    (30, 'monthly_rate', 'monthly'),
    (7, 'weekly_rate', 'weekly'),
)


def calculate_base_price(schedule: RateSchedule, day_count: int) -> RateQuote | Rejection:
    """
    Price day_count rental days using the best applicable tier.

    Args:
        schedule: The listing's rate schedule
        day_count: Inclusive number of rental days (>= 1)

    Returns:
        RateQuote with gross (naive daily) price, tiered base price and the
        duration discount between them, or a Rejection for a bad day count.

    Usage:
        quote = calculate_base_price(schedule, 10)
        # daily 450, weekly 2800 -> base 2800 + 3 * 450 = 4150
    """
    if isinstance(day_count, bool) or not isinstance(day_count, int) or day_count < 1:
        return Rejection(
            RejectionReason.INVALID_DAY_COUNT,
            f"day count must be a positive integer, got {day_count!r}",
        )

    daily = schedule.money(schedule.daily_rate)
    gross_price = daily * day_count

    tier = 'daily'
    base_price = gross_price
    for block_days, rate_field, tier_name in RATE_TIERS:
        block_rate = getattr(schedule, rate_field)
        if block_rate is None or day_count < block_days:
            continue
        blocks, remaining_days = divmod(day_count, block_days)
        base_price = schedule.money(block_rate) * blocks + daily * remaining_days
        tier = tier_name
        break

    logger.debug(f"Priced {day_count} days at {tier} tier: {base_price} (gross {gross_price})")

    return RateQuote(
        day_count=day_count,
        tier=tier,
        gross_price=gross_price,
        base_price=base_price,
        duration_discount=gross_price - base_price,
    )
