"""Constants for accountabot.

This module centralizes all magic numbers and default values used throughout the application.
"""

from datetime import timedelta

from accountabot.models.task import Bucket, ReminderFrequency


# Task defaults
DEFAULT_BUCKET = Bucket.LATER
DEFAULT_REMINDER_FREQUENCY = ReminderFrequency.HOURLY

# Escalation
MAX_ESCALATION_LEVEL = 3

REMINDER_INTERVALS = {
    ReminderFrequency.HOURLY: timedelta(hours=1),
    ReminderFrequency.FEW_HOURS: timedelta(hours=3),
    ReminderFrequency.TWICE_DAILY: timedelta(hours=12),
}

# Parsing
MIN_MESSAGE_LENGTH = 3
MIN_TITLE_LENGTH = 2

# Column classification (calendar days ahead)
THIS_WEEK_MAX_DAYS = 7

# Accountability
STALE_DAYS_THRESHOLD = 7
DEFAULT_FOCUS_MINUTES = 60
DEFAULT_VACATION_DAYS = 1
