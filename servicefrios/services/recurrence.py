"""Recurrence math for maintenance schedules.

All arithmetic works on calendar dates; month and year steps use
``relativedelta`` so that Jan 31 + 1 month lands on the last day of February
instead of overflowing into March.
"""
import calendar
import logging
from datetime import date, timedelta
from typing import Iterator, Optional

from dateutil.relativedelta import relativedelta

from servicefrios.errors import RecurrenceConfigError
from servicefrios.models.enums import Frequency

logger = logging.getLogger(__name__)

# Step used for schedules whose recurrence cannot be computed
FALLBACK_INTERVAL_DAYS = 30

_STEPS = {
    Frequency.DAILY: relativedelta(days=1),
    Frequency.WEEKLY: relativedelta(days=7),
    Frequency.BIWEEKLY: relativedelta(days=15),
    Frequency.MONTHLY: relativedelta(months=1),
    Frequency.BIMONTHLY: relativedelta(months=2),
    Frequency.QUARTERLY: relativedelta(months=3),
    Frequency.SEMIANNUAL: relativedelta(months=6),
    Frequency.ANNUAL: relativedelta(years=1),
}


def _parse_frequency(frequency) -> Frequency:
    try:
        return Frequency(frequency)
    except ValueError:
        raise RecurrenceConfigError(f"Unknown frequency: {frequency!r}") from None


def validate_recurrence(
    frequency,
    custom_interval_days: Optional[int] = None,
    day_of_month: Optional[int] = None
) -> Frequency:
    """Check that a recurrence descriptor can be computed; returns the parsed frequency."""
    freq = _parse_frequency(frequency)
    if freq == Frequency.CUSTOM:
        if custom_interval_days is None:
            raise RecurrenceConfigError("CUSTOM frequency requires custom_interval_days")
        if custom_interval_days < 1:
            raise RecurrenceConfigError("custom_interval_days must be at least 1")
    if day_of_month is not None and not 1 <= day_of_month <= 31:
        raise RecurrenceConfigError("day_of_month must be between 1 and 31")
    return freq


def next_occurrence(
    frequency,
    anchor: date,
    custom_interval_days: Optional[int] = None,
    day_of_month: Optional[int] = None
) -> date:
    """Return the occurrence that follows ``anchor``.

    Raises RecurrenceConfigError for an unknown frequency or a CUSTOM
    frequency without a positive interval.
    """
    freq = validate_recurrence(frequency, custom_interval_days, day_of_month)

    if freq == Frequency.CUSTOM:
        return anchor + timedelta(days=custom_interval_days)

    result = anchor + _STEPS[freq]

    if freq == Frequency.MONTHLY and day_of_month:
        last_day = calendar.monthrange(result.year, result.month)[1]
        result = result.replace(day=min(day_of_month, last_day))

    return result


def advance(
    frequency,
    anchor: date,
    custom_interval_days: Optional[int] = None,
    day_of_month: Optional[int] = None
) -> date:
    """Like next_occurrence, but falls back to a 30-day step for malformed schedules."""
    try:
        return next_occurrence(frequency, anchor, custom_interval_days, day_of_month)
    except RecurrenceConfigError as e:
        logger.warning(f"Invalid recurrence ({e}); falling back to {FALLBACK_INTERVAL_DAYS} days")
        return anchor + timedelta(days=FALLBACK_INTERVAL_DAYS)


def iter_occurrences(schedule, horizon: date) -> Iterator[date]:
    """Yield the schedule's occurrence dates from start_date up to horizon and end_date."""
    cursor = schedule.start_date
    while cursor <= horizon and (schedule.end_date is None or cursor <= schedule.end_date):
        yield cursor
        cursor = advance(
            schedule.frequency,
            cursor,
            schedule.custom_interval_days,
            schedule.day_of_month
        )
