"""
Calendar Arithmetic

Pure date helpers shared by the recurring-transaction materializer,
the contact scheduler and the weekly learning report.

DESIGN DECISION: Month arithmetic clamps to the last day of the target
month instead of overflowing into the next one. With an `anchor_day`
the preferred day is restored whenever the month is long enough, so a
template started on Jan 31 yields Feb 29, Mar 31, Apr 30 rather than
drifting to the 29th forever.
"""

import calendar
from datetime import date, datetime, timedelta
from typing import Optional

from lifeplanner.models.finance import RecurrenceFrequency


def add_months(day: date, months: int, anchor_day: Optional[int] = None) -> date:
    """
    Move `day` by a number of calendar months.

    Args:
        day: Starting date
        months: Months to add (may be negative)
        anchor_day: Preferred day of month; defaults to `day.day`

    Returns:
        The date in the target month, clamped to its last day
    """
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    wanted = anchor_day if anchor_day is not None else day.day
    return date(year, month, min(wanted, last_day))


def advance_date(
    day: date,
    frequency: RecurrenceFrequency,
    anchor_day: Optional[int] = None,
) -> date:
    """
    Next occurrence after `day` for a recurrence frequency.

    daily: +1 day, weekly: +7 days, monthly: +1 month, yearly: +12 months.
    """
    if frequency == RecurrenceFrequency.DAILY:
        return day + timedelta(days=1)
    if frequency == RecurrenceFrequency.WEEKLY:
        return day + timedelta(days=7)
    if frequency == RecurrenceFrequency.MONTHLY:
        return add_months(day, 1, anchor_day)
    if frequency == RecurrenceFrequency.YEARLY:
        return add_months(day, 12, anchor_day)
    raise ValueError(f"Unsupported recurrence frequency: {frequency}")


def days_since(then: datetime, now: datetime) -> int:
    """Whole days elapsed from `then` to `now`, floored."""
    return (now - then) // timedelta(days=1)


def start_of_week(now: datetime) -> datetime:
    """Most recent Sunday at 00:00 (today if today is Sunday)."""
    # weekday(): Monday=0 .. Sunday=6
    days_back = (now.weekday() + 1) % 7
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return midnight - timedelta(days=days_back)
