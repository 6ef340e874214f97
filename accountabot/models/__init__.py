"""Data models for accountabot."""

from accountabot.models.task import (
    Bucket,
    RecurrenceConfig,
    RecurrencePattern,
    ReminderFrequency,
    TagCategory,
    Task,
    TaskTag,
)
from accountabot.models.user_settings import SuppressionWindow, UserSettings

__all__ = [
    "Bucket",
    "RecurrenceConfig",
    "RecurrencePattern",
    "ReminderFrequency",
    "TagCategory",
    "Task",
    "TaskTag",
    "SuppressionWindow",
    "UserSettings",
]
