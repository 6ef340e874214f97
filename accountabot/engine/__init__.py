"""Reminder and lifecycle engine for accountabot."""

from accountabot.engine.columns import classify_deadline
from accountabot.engine.recurrence import next_occurrence, describe_recurrence
from accountabot.engine.reminders import (
    evaluate_task,
    ReminderDecision,
    run_reminder_sweep,
    run_daily_summary,
    SweepResult,
)

__all__ = [
    "classify_deadline",
    "next_occurrence",
    "describe_recurrence",
    "evaluate_task",
    "ReminderDecision",
    "run_reminder_sweep",
    "run_daily_summary",
    "SweepResult",
]
