"""Promo code lookup and the one-code-per-run promo slot."""

import logging
import re

from . import conf
from .exceptions import InvalidConfigurationError
from .money import Money
from .value_objects import PromoCode, Rejection, RejectionReason


logger = logging.getLogger(__name__)

CODE_PATTERN = re.compile(r'^[A-Z0-9_-]{1,32}$')


def normalize_code(code) -> str | None:
    """Upper-case and trim a code; None if it can't be a valid code."""
    if not isinstance(code, str):
        return None
    normalized = code.strip().upper()
    if not CODE_PATTERN.match(normalized):
        return None
    return normalized


def get_promo_table() -> dict[str, PromoCode]:
    """
    Build the promo table from RENTAL_PRICING_PROMO_CODES.

    Raises:
        InvalidConfigurationError: If a code or discount is malformed
    """
    table = {}
    for raw_code, fraction in conf.get_promo_codes().items():
        promo = PromoCode(raw_code, fraction)
        table[promo.code] = promo
    return table


def lookup_promo(code, table: dict[str, PromoCode] | None = None) -> PromoCode | None:
    """
    Resolve a promo code, ignoring case and surrounding whitespace.

    Returns:
        The PromoCode, or None when the code is unknown or malformed.

    Raises:
        InvalidConfigurationError: If the settings table is malformed
    """
    normalized = normalize_code(code)
    if normalized is None:
        return None
    if table is None:
        table = get_promo_table()
    return table.get(normalized)


def promo_discount(code, base_price: Money, table: dict[str, PromoCode] | None = None) -> Money | Rejection:
    """Discount that code takes off base_price."""
    try:
        promo = lookup_promo(code, table)
    except InvalidConfigurationError as e:
        return Rejection(RejectionReason.INVALID_CONFIGURATION, str(e))
    if promo is None:
        return Rejection(RejectionReason.PROMO_NOT_FOUND, f"unknown promo code {code!r}")
    return base_price * promo.discount_fraction


class PromoSlot:
    """
    Holds the single promo code allowed per pricing run.

    Usage:
        slot = PromoSlot()
        slot.apply("summer20")   # PromoCode('SUMMER20', Decimal('0.20'))
        slot.apply("FIRST10")    # Rejection(PROMO_ALREADY_APPLIED)
        calculate_breakdown(schedule, days, promo=slot.active)
    """

    def __init__(self, table: dict[str, PromoCode] | None = None):
        self.table = table
        self.active: PromoCode | None = None

    def apply(self, code) -> PromoCode | Rejection:
        if self.active is not None:
            return Rejection(
                RejectionReason.PROMO_ALREADY_APPLIED,
                f"{self.active.code} is already applied",
            )
        try:
            promo = lookup_promo(code, self.table)
        except InvalidConfigurationError as e:
            logger.warning(f"Promo table unusable: {e}")
            return Rejection(RejectionReason.INVALID_CONFIGURATION, str(e))
        if promo is None:
            logger.info(f"Rejected promo code {code!r}")
            return Rejection(RejectionReason.PROMO_NOT_FOUND, f"unknown promo code {code!r}")
        self.active = promo
        return promo

    def clear(self):
        self.active = None
