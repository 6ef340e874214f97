"""Next-occurrence calculation for recurring tasks.

Weekdays use the Sunday=0 .. Saturday=6 convention stored on RecurrenceConfig.
The next occurrence keeps the time of day of the current deadline, and is
always on a calendar day after the evaluation day.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional

from dateutil.relativedelta import relativedelta

from accountabot.models.task import RecurrenceConfig, RecurrencePattern


DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def sunday_based_weekday(d: date) -> int:
    # Python weekday: Monday=0 ... Sunday=6
    return (d.weekday() + 1) % 7


def _next_daily(current: datetime, today: datetime) -> datetime:
    candidate = current + timedelta(days=1)
    if candidate.date() <= today.date():
        return today + timedelta(days=1)
    return candidate


def _next_weekly(current: datetime, today: datetime, day_of_week: Optional[int]) -> datetime:
    target = day_of_week if day_of_week is not None else sunday_based_weekday(current)

    candidate = current + timedelta(days=7)
    if day_of_week is not None:
        candidate = candidate + timedelta(days=target - sunday_based_weekday(candidate))

    if candidate.date() <= today.date():
        days_ahead = (target - sunday_based_weekday(today)) % 7
        return today + timedelta(days=days_ahead or 7)
    return candidate


def _next_monthly(current: datetime, today: datetime, day_of_month: Optional[int]) -> datetime:
    target = day_of_month or current.day

    # relativedelta(day=N) clamps to the last valid day of the month.
    candidate = current + relativedelta(months=1, day=target)
    if candidate.date() <= today.date():
        candidate = today + relativedelta(day=target)
        if candidate.date() <= today.date():
            candidate = today + relativedelta(months=1, day=target)
    return candidate


def next_occurrence(
    config: RecurrenceConfig,
    current_deadline: datetime,
    now: Optional[datetime] = None,
) -> Optional[datetime]:
    """Compute the deadline of the next occurrence of a recurring task.

    Args:
        config: Recurrence settings of the completed task
        current_deadline: Deadline of the completed instance
        now: Evaluation time (defaults to current local time)

    Returns:
        The next deadline, or None if the recurrence has ended
    """
    now = now or datetime.now()
    # "today" carries the current deadline's time of day so late evaluations keep it.
    today = datetime.combine(now.date(), current_deadline.time())
    pattern = RecurrencePattern(config.pattern)

    if pattern == RecurrencePattern.DAILY:
        candidate = _next_daily(current_deadline, today)
    elif pattern == RecurrencePattern.WEEKLY:
        candidate = _next_weekly(current_deadline, today, config.day_of_week)
    elif pattern == RecurrencePattern.MONTHLY:
        candidate = _next_monthly(current_deadline, today, config.day_of_month)
    else:
        return None

    if config.end_date is not None and candidate > config.end_date:
        return None
    return candidate


def describe_recurrence(config: Optional[RecurrenceConfig]) -> str:
    """Human-readable recurrence summary, e.g. "Repeats weekly on Friday"."""
    if config is None:
        return ""

    pattern = RecurrencePattern(config.pattern)
    if pattern == RecurrencePattern.DAILY:
        desc = "Repeats daily"
    elif pattern == RecurrencePattern.WEEKLY:
        desc = "Repeats weekly"
        if config.day_of_week is not None:
            desc += f" on {DAY_NAMES[config.day_of_week]}"
    else:
        desc = "Repeats monthly"
        if config.day_of_month is not None:
            desc += f" on day {config.day_of_month}"

    if config.end_date is not None:
        end = config.end_date
        desc += f" until {end:%b} {end.day}, {end.year}"
    return desc
