"""Focus/vacation suppression, morning commitment and stale-task confrontation.

All functions are pure: they return updated copies of the inputs.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from accountabot.models.constants import (
    DEFAULT_FOCUS_MINUTES,
    DEFAULT_VACATION_DAYS,
    STALE_DAYS_THRESHOLD,
)
from accountabot.models.task import Task
from accountabot.models.user_settings import UserSettings


def _touch(settings: UserSettings, now: datetime, **update) -> UserSettings:
    return settings.model_copy(update={**update, "updated_at": now})


def enter_focus_mode(settings: UserSettings, minutes: int = DEFAULT_FOCUS_MINUTES, now: Optional[datetime] = None) -> UserSettings:
    now = now or datetime.now()
    return _touch(settings, now, focus_until=now + timedelta(minutes=minutes))


def exit_focus_mode(settings: UserSettings, now: Optional[datetime] = None) -> UserSettings:
    return _touch(settings, now or datetime.now(), focus_until=None)


def enter_vacation_mode(settings: UserSettings, days: int = DEFAULT_VACATION_DAYS, now: Optional[datetime] = None) -> UserSettings:
    now = now or datetime.now()
    return _touch(settings, now, vacation_until=now + timedelta(days=days))


def exit_vacation_mode(settings: UserSettings, now: Optional[datetime] = None) -> UserSettings:
    return _touch(settings, now or datetime.now(), vacation_until=None)


def is_reminder_suppressed(settings: UserSettings, now: datetime) -> bool:
    """Reminders are withheld during focus and during vacation."""
    return settings.focus_window.is_active_at(now) or settings.vacation_window.is_active_at(now)


def is_summary_suppressed(settings: UserSettings, now: datetime) -> bool:
    """Daily summary and morning commitment only respect vacation."""
    return settings.vacation_window.is_active_at(now)


def needs_morning_commitment(settings: UserSettings, now: Optional[datetime] = None) -> bool:
    now = now or datetime.now()
    if is_summary_suppressed(settings, now):
        return False
    return settings.last_commitment_date != now.date().isoformat()


def complete_morning_commitment(
    settings: UserSettings,
    task_ids: List[str],
    now: Optional[datetime] = None,
) -> UserSettings:
    now = now or datetime.now()
    return _touch(
        settings,
        now,
        last_commitment_date=now.date().isoformat(),
        committed_task_ids=list(task_ids),
    )


def get_overdue_tasks(tasks: List[Task], now: Optional[datetime] = None) -> List[Task]:
    now = now or datetime.now()
    return [task for task in tasks if not task.is_done() and task.is_overdue(now)]


def get_stale_tasks(
    tasks: List[Task],
    settings: UserSettings,
    now: Optional[datetime] = None,
    days: int = STALE_DAYS_THRESHOLD,
) -> List[Task]:
    """Open tasks created more than `days` ago that the user has not dismissed."""
    now = now or datetime.now()
    threshold = now - timedelta(days=days)
    dismissed = set(settings.dismissed_stale_task_ids)
    return [
        task for task in tasks
        if not task.is_done() and task.id not in dismissed and task.created_at < threshold
    ]


def dismiss_stale_task(settings: UserSettings, task_id: str, now: Optional[datetime] = None) -> UserSettings:
    if task_id in settings.dismissed_stale_task_ids:
        return settings
    return _touch(
        settings,
        now or datetime.now(),
        dismissed_stale_task_ids=[*settings.dismissed_stale_task_ids, task_id],
    )
