"""Price negotiation between a renter and an equipment owner.

State machine:

    active -> accepted   (owner accepts an offer, or renter takes the standing offer)
    active -> rejected   (either party walks away)
    active -> expired    (external timeout, or the round cap is reached)

accepted/rejected/expired are terminal.

Owner policy (decide_owner_response), with pct = requested discount:
- pct <= 5: accept
- pct <= 15 from the third offer on: accept
- otherwise counter at original * (1 - min(pct * 0.6, 20) / 100);
  pct > 30 is answered as "too steep", the rest as "meet halfway"

The decision is pure. The owner's reply latency lives in Negotiator, which
awaits a ResponseDelay between recording the renter's offer and applying
the reply. Only one offer per session can be waiting for a reply.
"""

import asyncio
import logging
import random
import uuid
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from django.utils import timezone

from . import conf
from .exceptions import InvalidConfigurationError
from .money import Money, to_decimal
from .value_objects import PricingBreakdown, Rejection, RejectionReason


logger = logging.getLogger(__name__)

AUTO_ACCEPT_DISCOUNT = Decimal("5")
NEGOTIATED_ACCEPT_DISCOUNT = Decimal("15")
NEGOTIATED_ACCEPT_MIN_ROUNDS = 2
STEEP_DISCOUNT = Decimal("30")
COUNTER_SHARE = Decimal("0.6")
MAX_COUNTER_DISCOUNT = Decimal("20")


class NegotiationStatus(str, Enum):
    ACTIVE = "active"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class SenderRole(str, Enum):
    RENTER = "renter"
    OWNER = "owner"


class OwnerAction(str, Enum):
    ACCEPT = "accept"
    COUNTER = "counter"


@dataclass(frozen=True)
class NegotiationOffer:
    """One message in the negotiation history. Never modified once appended."""

    id: str
    amount: Money
    sender_role: SenderRole
    message: str
    timestamp: datetime


@dataclass(frozen=True)
class OwnerResponse:
    """The owner's reply to one renter offer."""

    action: OwnerAction
    amount: Money
    requested_discount_percent: Decimal
    message: str

    @property
    def accepted(self) -> bool:
        return self.action == OwnerAction.ACCEPT


def _whole_percent(value: Decimal) -> int:
    return int(value.to_integral_value())


def requested_discount_percent(original_total: Money, amount: Money) -> Decimal:
    """100 * (1 - amount / original_total), computed exactly."""
    return (original_total.amount - amount.amount) * 100 / original_total.amount


def counter_offer_amount(original_total: Money, discount_percent: Decimal) -> Money:
    """Owner's counter: a share of the requested discount, capped, to the cent."""
    counter_discount = min(discount_percent * COUNTER_SHARE, MAX_COUNTER_DISCOUNT)
    return (original_total * (1 - counter_discount / 100)).quantized()


def decide_owner_response(original_total: Money, amount: Money, round_count: int) -> OwnerResponse:
    """
    Decide how the owner answers an offer.

    Args:
        original_total: The price the negotiation is anchored to
        amount: The renter's offer, 0 < amount < original_total
        round_count: Offers made before this one

    Returns:
        OwnerResponse accepting the offer or carrying a counter-offer.
    """
    pct = requested_discount_percent(original_total, amount)

    if pct <= AUTO_ACCEPT_DISCOUNT:
        return OwnerResponse(
            action=OwnerAction.ACCEPT,
            amount=amount,
            requested_discount_percent=pct,
            message=f"Deal! I can accept {amount} for the rental. Let's finalize this!",
        )

    if pct <= NEGOTIATED_ACCEPT_DISCOUNT and round_count >= NEGOTIATED_ACCEPT_MIN_ROUNDS:
        return OwnerResponse(
            action=OwnerAction.ACCEPT,
            amount=amount,
            requested_discount_percent=pct,
            message=f"You drive a hard bargain! Alright, {amount} it is. We have a deal!",
        )

    counter = counter_offer_amount(original_total, pct)
    if pct > STEEP_DISCOUNT:
        message = (
            f"I appreciate the offer, but {_whole_percent(pct)}% off is too steep. "
            f"My best counter is {counter} - that's the lowest I can go."
        )
    else:
        counter_pct = requested_discount_percent(original_total, counter)
        message = (
            f"Thanks for the offer! I can meet you halfway at {counter}. "
            f"That's {_whole_percent(counter_pct)}% off."
        )
    return OwnerResponse(
        action=OwnerAction.COUNTER,
        amount=counter,
        requested_discount_percent=pct,
        message=message,
    )


_DEFAULT = object()


class NegotiationSession:
    """
    Offer/counter-offer history for one (equipment, renter, rental days).

    Single writer: callers send one offer at a time. begin_offer() records
    the renter's offer and holds it pending until resolve_offer() applies
    the owner's reply; submit_offer() does both at once.

    Open sessions with start() or for_breakdown(), which return a
    Rejection for an unusable total. The constructor raises ValueError.

    Usage:
        session = NegotiationSession.for_breakdown(breakdown, equipment_id="eq-1", renter_id="u-7")
        response = session.submit_offer(Decimal("2950"))
        if session.is_active:
            session.accept_current_offer()
        session.agreed_total  # Money or None
    """

    def __init__(
        self,
        original_total: Money,
        *,
        equipment_id: str | None = None,
        renter_id: str | None = None,
        rental_days: int | None = None,
        max_rounds=_DEFAULT,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ):
        if not original_total.is_positive():
            raise ValueError("original_total must be positive")
        self.original_total = original_total
        self.equipment_id = equipment_id
        self.renter_id = renter_id
        self.rental_days = rental_days
        self.max_rounds = conf.get_negotiation_max_rounds() if max_rounds is _DEFAULT else max_rounds
        self.clock = clock or timezone.now
        self.id_factory = id_factory or (lambda: str(uuid.uuid4()))

        self.current_offer = original_total
        self.status = NegotiationStatus.ACTIVE
        self.round_count = 0
        self.pending_offer: Money | None = None
        self._history: list[NegotiationOffer] = []

    @classmethod
    def start(cls, original_total, **kwargs) -> 'NegotiationSession | Rejection':
        """
        Open a negotiation, returning a Rejection instead of raising.

        Returns:
            NegotiationSession, or a Rejection when the total isn't a
            positive Money (INVALID_TOTAL) or RENTAL_PRICING_NEGOTIATION_MAX_ROUNDS
            is malformed (INVALID_CONFIGURATION).
        """
        if not isinstance(original_total, Money) or not original_total.is_positive():
            return Rejection(
                RejectionReason.INVALID_TOTAL,
                f"cannot negotiate from {original_total!r}",
            )
        try:
            return cls(original_total, **kwargs)
        except InvalidConfigurationError as e:
            return Rejection(RejectionReason.INVALID_CONFIGURATION, str(e))

    @classmethod
    def for_breakdown(cls, breakdown: PricingBreakdown, **kwargs) -> 'NegotiationSession | Rejection':
        """Start a negotiation anchored to a breakdown's total."""
        kwargs.setdefault('rental_days', breakdown.day_count)
        return cls.start(breakdown.total.quantized(), **kwargs)

    @property
    def history(self) -> tuple[NegotiationOffer, ...]:
        return tuple(self._history)

    @property
    def is_active(self) -> bool:
        return self.status == NegotiationStatus.ACTIVE

    @property
    def agreed_total(self) -> Money | None:
        if self.status != NegotiationStatus.ACCEPTED:
            return None
        return self.current_offer

    @property
    def discount_percent(self) -> Decimal:
        """Discount of the standing offer off the original total."""
        return requested_discount_percent(self.original_total, self.current_offer)

    def _append(self, amount: Money, role: SenderRole, message: str, now: datetime | None):
        offer = NegotiationOffer(
            id=self.id_factory(),
            amount=amount,
            sender_role=role,
            message=message,
            timestamp=now or self.clock(),
        )
        self._history.append(offer)
        return offer

    def _closed(self) -> Rejection:
        return Rejection(
            RejectionReason.SESSION_CLOSED,
            f"negotiation is {self.status.value}",
        )

    def _coerce_amount(self, amount) -> Money | None:
        if isinstance(amount, Money):
            if amount.currency != self.original_total.currency:
                return None
            return amount
        try:
            value = to_decimal(amount)
        except (ArithmeticError, ValueError, TypeError):
            return None
        if not value.is_finite():
            return None
        return Money(value, self.original_total.currency)

    def begin_offer(self, amount, message: str | None = None, now: datetime | None = None) -> Money | Rejection:
        """
        Record a renter offer and hold it for the owner's reply.

        Offers must lie strictly between 0 and the original total. A
        rejected offer leaves the session unchanged.

        Returns:
            The recorded amount, or a Rejection.
        """
        if not self.is_active:
            return self._closed()
        if self.pending_offer is not None:
            return Rejection(
                RejectionReason.OFFER_IN_FLIGHT,
                f"waiting for a reply to {self.pending_offer}",
            )

        offer = self._coerce_amount(amount)
        if offer is None or not offer.is_positive() or offer >= self.original_total:
            return Rejection(
                RejectionReason.INVALID_OFFER,
                f"offer {amount!r} must be between 0 and {self.original_total}",
            )

        if message is None:
            pct = _whole_percent(requested_discount_percent(self.original_total, offer))
            span = f"the {self.rental_days}-day rental" if self.rental_days else "the rental"
            message = f"I'd like to offer {offer} ({pct}% off) for {span}."

        self._append(offer, SenderRole.RENTER, message, now)
        self.pending_offer = offer
        return offer

    def resolve_offer(self, now: datetime | None = None) -> OwnerResponse | Rejection:
        """Apply the owner's reply to the pending offer."""
        if self.pending_offer is None:
            if not self.is_active:
                return self._closed()
            return Rejection(RejectionReason.INVALID_OFFER, "no offer is waiting for a reply")

        offer = self.pending_offer
        response = decide_owner_response(self.original_total, offer, self.round_count)
        self.pending_offer = None
        self.round_count += 1

        self._append(response.amount, SenderRole.OWNER, response.message, now)
        self.current_offer = response.amount

        if response.accepted:
            self.status = NegotiationStatus.ACCEPTED
            logger.info(
                f"Negotiation for {self.equipment_id} accepted at {response.amount} "
                f"in round {self.round_count}"
            )
        elif self.max_rounds is not None and self.round_count >= self.max_rounds:
            self.status = NegotiationStatus.EXPIRED
            logger.info(
                f"Negotiation for {self.equipment_id} expired after {self.round_count} rounds"
            )
        else:
            logger.info(
                f"Negotiation for {self.equipment_id} round {self.round_count}: "
                f"countered {offer} with {response.amount}"
            )
        return response

    def cancel_pending(self) -> bool:
        """Drop a pending offer whose reply will never arrive."""
        if self.pending_offer is None:
            return False
        self.pending_offer = None
        return True

    def submit_offer(self, amount, message: str | None = None, now: datetime | None = None) -> OwnerResponse | Rejection:
        """Record a renter offer and apply the owner's reply immediately."""
        started = self.begin_offer(amount, message=message, now=now)
        if isinstance(started, Rejection):
            return started
        return self.resolve_offer(now=now)

    def accept_current_offer(self) -> Money | Rejection:
        """Renter takes the standing offer as-is."""
        if not self.is_active:
            return self._closed()
        if self.pending_offer is not None:
            return Rejection(
                RejectionReason.OFFER_IN_FLIGHT,
                f"waiting for a reply to {self.pending_offer}",
            )
        self.status = NegotiationStatus.ACCEPTED
        logger.info(f"Negotiation for {self.equipment_id}: renter accepted {self.current_offer}")
        return self.current_offer

    def reject(self, by: SenderRole = SenderRole.RENTER) -> NegotiationStatus | Rejection:
        """Either party walks away."""
        if not self.is_active:
            return self._closed()
        self.pending_offer = None
        self.status = NegotiationStatus.REJECTED
        logger.info(f"Negotiation for {self.equipment_id} rejected by {by.value}")
        return self.status

    def expire(self) -> NegotiationStatus | Rejection:
        """Called by the timeout collaborator when the session runs out of time."""
        if not self.is_active:
            return self._closed()
        self.pending_offer = None
        self.status = NegotiationStatus.EXPIRED
        logger.info(f"Negotiation for {self.equipment_id} expired")
        return self.status

    def to_dict(self) -> dict:
        """Snapshot for chat-style rendering."""
        return {
            'equipment_id': self.equipment_id,
            'renter_id': self.renter_id,
            'rental_days': self.rental_days,
            'original_total': str(self.original_total.quantized().amount),
            'current_offer': str(self.current_offer.quantized().amount),
            'currency': self.original_total.currency,
            'status': self.status.value,
            'round_count': self.round_count,
            'awaiting_reply': self.pending_offer is not None,
            'history': [
                {
                    'id': offer.id,
                    'amount': str(offer.amount.quantized().amount),
                    'sender_role': offer.sender_role.value,
                    'message': offer.message,
                    'timestamp': offer.timestamp.isoformat(),
                }
                for offer in self._history
            ],
        }


# =============================================================================
# SUGGESTIONS
# =============================================================================

class Likelihood(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class NegotiationSuggestion:
    discount_percent: int
    reason: str
    likelihood: Likelihood
    amount: Money


BULK_BOOKING_DAYS = 7


def suggest_offers(original_total: Money, rental_days: int) -> list[NegotiationSuggestion]:
    """Canned opening offers shown to the renter, mildest first."""
    bulk_likelihood = Likelihood.HIGH if rental_days >= BULK_BOOKING_DAYS else Likelihood.MEDIUM
    options = (
        (10, "First-time renter discount", Likelihood.HIGH),
        (15, f"{rental_days}+ day bulk booking", bulk_likelihood),
        (20, "Off-peak season offer", Likelihood.MEDIUM),
        (25, "Repeat customer loyalty", Likelihood.LOW),
    )
    return [
        NegotiationSuggestion(
            discount_percent=discount,
            reason=reason,
            likelihood=likelihood,
            amount=(original_total * (Decimal(100 - discount) / 100)).quantized(),
        )
        for discount, reason, likelihood in options
    ]


# =============================================================================
# OWNER REPLY LATENCY
# =============================================================================

class ResponseDelay(ABC):
    """How long the owner takes to answer."""

    @abstractmethod
    async def wait(self):
        pass


class NoDelay(ResponseDelay):
    """Reply immediately; for tests and batch use."""

    async def wait(self):
        await asyncio.sleep(0)


class RandomDelay(ResponseDelay):
    """Uniformly random delay, RENTAL_PRICING_OWNER_RESPONSE_DELAY by default."""

    def __init__(self, low: float | None = None, high: float | None = None, rng: random.Random | None = None):
        if low is None or high is None:
            default_low, default_high = conf.get_owner_response_delay()
            low = default_low if low is None else low
            high = default_high if high is None else high
        if low < 0 or high < low:
            raise ValueError("delay bounds require 0 <= low <= high")
        self.low = low
        self.high = high
        self.rng = rng or random.Random()

    def next_delay(self) -> float:
        return self.rng.uniform(self.low, self.high)

    async def wait(self):
        await asyncio.sleep(self.next_delay())


class Negotiator:
    """
    Sends renter offers and waits for the owner's reply.

    Usage:
        negotiator = Negotiator(delay=NoDelay())
        response = await negotiator.send_offer(session, Decimal("2950"))
    """

    def __init__(self, delay: ResponseDelay | None = None):
        self.delay = delay or RandomDelay()

    async def send_offer(self, session: NegotiationSession, amount, message: str | None = None) -> OwnerResponse | Rejection:
        """
        Record an offer, wait out the owner's reply, then apply it.

        A second offer sent while one is pending is rejected with
        OFFER_IN_FLIGHT. If the session expires during the wait the
        result is a SESSION_CLOSED Rejection.
        """
        started = session.begin_offer(amount, message=message)
        if isinstance(started, Rejection):
            return started
        try:
            await self.delay.wait()
        except asyncio.CancelledError:
            session.cancel_pending()
            raise
        return session.resolve_offer()
