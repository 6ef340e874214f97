"""Column (bucket) classification for new tasks.

Deterministic on calendar-day difference, not elapsed hours.
"""

from datetime import datetime

from accountabot.models.constants import THIS_WEEK_MAX_DAYS
from accountabot.models.task import Bucket


def days_until(deadline: datetime, now: datetime) -> int:
    """Whole calendar days from now's date to the deadline's date."""
    return (deadline.date() - now.date()).days


def classify_deadline(deadline: datetime, now: datetime) -> Bucket:
    """Map a deadline onto one of the three active buckets.

    Args:
        deadline: Resolved task deadline
        now: Current time

    Returns:
        today for today or earlier, this_week for 1..7 days ahead, later otherwise
    """
    diff_days = days_until(deadline, now)
    if diff_days <= 0:
        return Bucket.TODAY
    if diff_days <= THIS_WEEK_MAX_DAYS:
        return Bucket.THIS_WEEK
    return Bucket.LATER
