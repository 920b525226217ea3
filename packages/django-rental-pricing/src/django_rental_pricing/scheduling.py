"""Demand-aware scheduling: per-day discount calendar and window suggestions.

The demand levels, discounts and recommended windows below are a fixed
calendar heuristic. They are NOT derived from booking data. Consumers
should present them as promotional guidance, and a real demand model can
replace CalendarHeuristicPolicy behind the RecommendationPolicy interface.

Day rules (weekday discounts stack, weekends never discount):
- Saturday/Sunday: high demand, 0%
- Monday-Friday: low demand, 15%
- Tuesday/Wednesday: 20%, recommended
- Weekdays from RENTAL_PRICING_MONTH_END_START_DAY on: +10 points,
  recommended ("End of month special")
"""

import calendar
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum

from . import conf
from .exceptions import InvalidConfigurationError
from .money import Money
from .rates import calculate_base_price
from .value_objects import DateRange, RateSchedule, Rejection, RejectionReason


logger = logging.getLogger(__name__)

WEEKDAY_DISCOUNT = 15
QUIET_WEEKDAY_DISCOUNT = 20
QUIET_WEEKDAYS = (calendar.TUESDAY, calendar.WEDNESDAY)
MONTH_END_BONUS = 10


class DemandLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class TimeSlot:
    """One calendar day with its heuristic demand and discounted price."""

    date: date
    available: bool
    demand_level: DemandLevel
    discount_percent: int
    daily_rate: Money
    price: Money
    recommended: bool = False
    reason: str | None = None

    @property
    def savings(self) -> Money:
        return self.daily_rate - self.price


@dataclass(frozen=True)
class WindowRecommendation:
    """A suggested rental window with its precomputed savings."""

    start: date
    end: date
    total_savings: Money
    expected_total: Money
    reason: str
    confidence: int  # 0-100, fixed per policy entry
    policy: str

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start, self.end)


@dataclass(frozen=True)
class WindowQuote:
    """Totals for a span of slots; unavailable days are skipped."""

    start: date
    end: date
    days: int
    total: Money
    savings: Money
    average_discount_percent: Decimal
    tiered_price: Money | None = None


def classify_day(
    day: date,
    daily_rate: Money,
    today: date,
    month_end_start_day: int | None = None,
) -> TimeSlot:
    """Apply the day rules to one date."""
    if month_end_start_day is None:
        month_end_start_day = conf.get_month_end_start_day()

    weekday = day.weekday()
    is_weekend = weekday >= calendar.SATURDAY
    recommended = False
    reason = None

    if is_weekend:
        demand = DemandLevel.HIGH
        discount = 0
    else:
        demand = DemandLevel.LOW
        discount = WEEKDAY_DISCOUNT
        if weekday in QUIET_WEEKDAYS:
            discount = QUIET_WEEKDAY_DISCOUNT
            recommended = True
            reason = f"Best day of the week - {QUIET_WEEKDAY_DISCOUNT}% off"
        if day.day >= month_end_start_day:
            discount += MONTH_END_BONUS
            recommended = True
            reason = "End of month special"

    price = daily_rate * (Decimal(100 - discount) / Decimal(100))
    return TimeSlot(
        date=day,
        available=day >= today,
        demand_level=demand,
        discount_percent=discount,
        daily_rate=daily_rate,
        price=price,
        recommended=recommended,
        reason=reason,
    )


def build_month(
    year: int,
    month: int,
    daily_rate: Money,
    today: date,
    month_end_start_day: int | None = None,
) -> list[TimeSlot]:
    """One TimeSlot per day of the month, in date order."""
    if month_end_start_day is None:
        month_end_start_day = conf.get_month_end_start_day()
    _, days_in_month = calendar.monthrange(year, month)
    return [
        classify_day(date(year, month, day_of_month), daily_rate, today, month_end_start_day)
        for day_of_month in range(1, days_in_month + 1)
    ]


def quote_window(
    slots: list[TimeSlot],
    start: date,
    end: date,
    schedule: RateSchedule | None = None,
) -> WindowQuote:
    """
    Sum the discounted price of the available slots between start and end.

    Args:
        slots: Calendar slots (typically one month from build_month)
        start, end: Inclusive window
        schedule: When given, tiered_price holds the rate calculator's price
            for the same number of days, for comparison

    Returns:
        WindowQuote; days is 0 if no available slot falls in the window.
    """
    chosen = [slot for slot in slots if start <= slot.date <= end and slot.available]
    currency = slots[0].price.currency if slots else (schedule.currency if schedule else "USD")

    total = Money.zero(currency)
    savings = Money.zero(currency)
    list_total = Money.zero(currency)
    for slot in chosen:
        total += slot.price
        savings += slot.savings
        list_total += slot.daily_rate

    if list_total.is_zero():
        average = Decimal("0")
    else:
        average = savings.amount * 100 / list_total.amount

    tiered_price = None
    if schedule is not None and chosen:
        quote = calculate_base_price(schedule, len(chosen))
        tiered_price = quote.base_price

    return WindowQuote(
        start=start,
        end=end,
        days=len(chosen),
        total=total,
        savings=savings,
        average_discount_percent=average,
        tiered_price=tiered_price,
    )


def _next_month(year: int, month: int) -> tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


class RecommendationPolicy(ABC):
    """Produces ranked rental windows for a month."""

    name = "base"

    @abstractmethod
    def recommend(self, year: int, month: int, daily_rate: Money, today: date) -> list[WindowRecommendation]:
        """Return windows ranked best-first."""
        pass


@dataclass(frozen=True)
class CalendarWindow:
    """Policy table entry: a window fixed by calendar position."""

    start_day: int
    end_day: int
    reason: str
    confidence: int
    ends_next_month: bool = False


class CalendarHeuristicPolicy(RecommendationPolicy):
    """
    Placeholder recommendation policy keyed on calendar position only.

    The WINDOWS table and confidences are constants, not estimates. One
    derived window is added: the longest run of recommended weekdays in
    the month. A fixed window that starts before today moves to its next
    occurrence on or after today, so the fixed windows are always offered.
    At most MAX_RECOMMENDATIONS are returned, highest confidence first.
    """

    name = "calendar_heuristic"

    MAX_RECOMMENDATIONS = 4
    LONGEST_RUN_CONFIDENCE = 80
    MIN_RUN_DAYS = 2

    WINDOWS = (
        CalendarWindow(15, 18, "Mid-week booking with 20% discount. Lowest demand period.", 95),
        CalendarWindow(27, 1, "End of month pricing + weekend rates. Great value!", 88, ends_next_month=True),
        CalendarWindow(8, 10, "Popular dates but still 15% off for weekday portion.", 75),
    )

    def __init__(self, month_end_start_day: int | None = None):
        self.month_end_start_day = month_end_start_day

    def recommend(self, year: int, month: int, daily_rate: Money, today: date) -> list[WindowRecommendation]:
        month_end_start_day = self.month_end_start_day or conf.get_month_end_start_day()
        candidates = []
        for entry in self.WINDOWS:
            start, end = self._upcoming_window(entry, year, month, today)
            candidates.append((start, end, entry.reason, entry.confidence))

        run = self._longest_recommended_run(year, month, daily_rate, today, month_end_start_day)
        if run is not None:
            candidates.append((
                run[0], run[1],
                "Longest run of discounted weekdays this month.",
                self.LONGEST_RUN_CONFIDENCE,
            ))

        recommendations = []
        for start, end, reason, confidence in candidates:
            if start < today:
                continue
            slots = [
                classify_day(day, daily_rate, today, month_end_start_day)
                for day in DateRange(start, end).days()
            ]
            total_savings = sum((slot.savings for slot in slots), Money.zero(daily_rate.currency))
            expected_total = sum((slot.price for slot in slots), Money.zero(daily_rate.currency))
            recommendations.append(WindowRecommendation(
                start=start,
                end=end,
                total_savings=total_savings,
                expected_total=expected_total,
                reason=reason,
                confidence=confidence,
                policy=self.name,
            ))

        recommendations.sort(key=lambda rec: rec.confidence, reverse=True)
        return recommendations[:self.MAX_RECOMMENDATIONS]

    def _upcoming_window(self, entry: CalendarWindow, year: int, month: int, today: date) -> tuple[date, date]:
        if (year, month) < (today.year, today.month):
            year, month = today.year, today.month
        start, end = self._window(entry, year, month)
        if start < today:
            year, month = _next_month(year, month)
            start, end = self._window(entry, year, month)
        return start, end

    @staticmethod
    def _window(entry: CalendarWindow, year: int, month: int) -> tuple[date, date]:
        start = date(year, month, entry.start_day)
        if entry.ends_next_month:
            _, days_in_month = calendar.monthrange(year, month)
            first_of_next = date(year, month, days_in_month) + timedelta(days=1)
            end = first_of_next.replace(day=entry.end_day)
        else:
            end = date(year, month, entry.end_day)
        return start, end

    def _longest_recommended_run(self, year, month, daily_rate, today, month_end_start_day):
        best = None
        run_start = None
        previous = None
        for slot in build_month(year, month, daily_rate, today, month_end_start_day):
            usable = slot.recommended and slot.available
            if usable and run_start is None:
                run_start = slot.date
            if not usable and run_start is not None:
                best = self._longer(best, (run_start, previous))
                run_start = None
            previous = slot.date
        if run_start is not None:
            best = self._longer(best, (run_start, previous))

        if best is None or (best[1] - best[0]).days + 1 < self.MIN_RUN_DAYS:
            return None
        return best

    @staticmethod
    def _longer(current, candidate):
        if current is None or (candidate[1] - candidate[0]) > (current[1] - current[0]):
            return candidate
        return current


@dataclass(frozen=True)
class MonthSchedule:
    """A month of slots plus ranked window recommendations."""

    year: int
    month: int
    slots: list[TimeSlot]
    recommendations: list[WindowRecommendation]

    def slot_for(self, day: date) -> TimeSlot | None:
        for slot in self.slots:
            if slot.date == day:
                return slot
        return None


class DemandScheduler:
    """
    Builds the scheduling view for one listing and month.

    Usage:
        scheduler = DemandScheduler()
        view = scheduler.month(schedule, 2026, 11, today=date(2026, 10, 19))
        best = view.recommendations[0]
        breakdown = price_range(schedule, best.date_range)
    """

    def __init__(self, policy: RecommendationPolicy | None = None):
        self.policy = policy or CalendarHeuristicPolicy()

    def month(self, schedule: RateSchedule, year: int, month: int, today: date) -> MonthSchedule | Rejection:
        """Slots and recommendations, or a Rejection for a malformed setting."""
        daily_rate = schedule.money(schedule.daily_rate)
        try:
            slots = build_month(year, month, daily_rate, today)
            recommendations = self.policy.recommend(year, month, daily_rate, today)
        except InvalidConfigurationError as e:
            logger.warning(f"Cannot build {year}-{month:02d} schedule: {e}")
            return Rejection(RejectionReason.INVALID_CONFIGURATION, str(e))
        logger.debug(
            f"Built {year}-{month:02d} schedule: {len(slots)} slots, "
            f"{len(recommendations)} recommendations from {self.policy.name}"
        )
        return MonthSchedule(year=year, month=month, slots=slots, recommendations=recommendations)

    def quote(self, schedule: RateSchedule, view: MonthSchedule, start: date, end: date) -> WindowQuote:
        return quote_window(view.slots, start, end, schedule=schedule)
