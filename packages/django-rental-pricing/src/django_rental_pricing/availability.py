"""Rental date validation and incremental range selection.

Nothing here reads the clock: callers pass today explicitly.

Optional availability collaborators:
- unavailable: any container of dates already booked elsewhere
- is_range_free: callable(DateRange) -> bool, consulted for completed ranges
"""

from collections.abc import Callable, Container
from datetime import date
from enum import Enum

from .value_objects import DateRange, RateSchedule, Rejection, RejectionReason


RangeFreeCheck = Callable[[DateRange], bool]

NO_DATES: frozenset = frozenset()


def is_selectable(day: date, today: date, unavailable: Container = NO_DATES) -> bool:
    """Check if a single date can be clicked: not in the past, not booked."""
    return day >= today and day not in unavailable


def check_rental_length(day_count: int, schedule: RateSchedule) -> Rejection | None:
    """Return a Rejection if day_count is outside the listing's window."""
    if day_count < schedule.min_rental_days:
        return Rejection(
            RejectionReason.BELOW_MIN_RENTAL_DAYS,
            f"{day_count} days is below the {schedule.min_rental_days}-day minimum",
        )
    if day_count > schedule.max_rental_days:
        return Rejection(
            RejectionReason.ABOVE_MAX_RENTAL_DAYS,
            f"{day_count} days exceeds the {schedule.max_rental_days}-day maximum",
        )
    return None


def validate_range(
    start: date | None,
    end: date | None,
    schedule: RateSchedule,
    today: date,
    unavailable: Container = NO_DATES,
    is_range_free: RangeFreeCheck | None = None,
) -> DateRange | Rejection:
    """
    Validate a candidate rental range.

    Rules, in order: both dates set, neither in the past, end not before
    start, day count within [min_rental_days, max_rental_days], and no
    booked date inside the range.

    Returns:
        The DateRange, or a Rejection naming the first rule that failed.
    """
    if start is None or end is None:
        return Rejection(RejectionReason.INCOMPLETE_RANGE, "start and end dates are required")
    if start < today or end < today:
        return Rejection(RejectionReason.DATE_IN_PAST, f"dates before {today} cannot be booked")
    if end < start:
        return Rejection(RejectionReason.END_BEFORE_START, f"end {end} is before start {start}")

    date_range = DateRange(start, end)
    rejection = check_rental_length(date_range.day_count, schedule)
    if rejection is not None:
        return rejection

    if not _range_is_free(date_range, unavailable, is_range_free):
        return Rejection(
            RejectionReason.DATES_UNAVAILABLE,
            f"{start} to {end} overlaps an existing booking",
        )
    return date_range


def _range_is_free(date_range, unavailable, is_range_free) -> bool:
    if any(day in unavailable for day in date_range.days()):
        return False
    if is_range_free is not None and not is_range_free(date_range):
        return False
    return True


class SelectionState(str, Enum):
    EMPTY = "empty"
    START_ONLY = "start_only"
    COMPLETE = "complete"


class DateSelection:
    """
    Two-click date range picker.

    States: empty -> start_only -> complete. A click on a past or booked
    date is ignored. From empty or complete, a click starts a new range.
    From start_only, an earlier date moves the start; a later date closes
    the range only if the resulting length fits the rental window,
    otherwise the click is ignored and the range stays open. If the span
    would cover a booked date, the clicked date becomes the new start.

    Usage:
        selection = DateSelection(schedule, today=date(2026, 10, 19))
        selection.click(date(2026, 10, 20))
        selection.click(date(2026, 10, 26))
        selection.date_range  # DateRange(2026-10-20, 2026-10-26)
    """

    def __init__(
        self,
        schedule: RateSchedule,
        today: date,
        unavailable: Container = NO_DATES,
        is_range_free: RangeFreeCheck | None = None,
    ):
        self.schedule = schedule
        self.today = today
        self.unavailable = unavailable
        self.is_range_free = is_range_free
        self.start: date | None = None
        self.end: date | None = None

    @property
    def state(self) -> SelectionState:
        if self.start is None:
            return SelectionState.EMPTY
        if self.end is None:
            return SelectionState.START_ONLY
        return SelectionState.COMPLETE

    @property
    def date_range(self) -> DateRange | None:
        if self.state != SelectionState.COMPLETE:
            return None
        return DateRange(self.start, self.end)

    def click(self, day: date) -> bool:
        """
        Apply one click.

        Returns:
            True if the selection changed, False if the click was ignored.
        """
        if not is_selectable(day, self.today, self.unavailable):
            return False

        if self.state != SelectionState.START_ONLY:
            self.start, self.end = day, None
            return True

        if day < self.start:
            self.start = day
            return True

        candidate = DateRange(self.start, day)
        if check_rental_length(candidate.day_count, self.schedule) is not None:
            return False
        if not _range_is_free(candidate, self.unavailable, self.is_range_free):
            self.start = day
            return True
        self.end = day
        return True

    def reset(self):
        self.start = None
        self.end = None
