"""Task creation factory for accountabot.

This module centralizes task creation logic so chat-created tasks and
recurrence successors get consistent default values.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from accountabot.models.task import Bucket, RecurrenceConfig, ReminderFrequency, Task, TaskTag
from accountabot.models.constants import DEFAULT_BUCKET, DEFAULT_REMINDER_FREQUENCY


def create_task_defaults() -> Dict[str, Any]:
    """Get default task values as a dictionary.

    Returns:
        Dictionary with default task field values using constants
    """
    return {
        "notes": "",
        "bucket": DEFAULT_BUCKET,
        "completed_at": None,
        "delegated_to": None,
        "reminder_frequency": DEFAULT_REMINDER_FREQUENCY,
        "last_reminded_at": None,
        "escalation_level": 0,
        "tags": [],
        "recurrence": None,
    }


def create_task_base(
    user_id: str,
    title: str,
    deadline: datetime,
    notes: Optional[str] = None,
    bucket: Optional[Bucket] = None,
    tags: Optional[List[TaskTag]] = None,
    reminder_frequency: Optional[ReminderFrequency] = None,
    recurrence: Optional[RecurrenceConfig] = None,
    now: Optional[datetime] = None,
) -> Task:
    """Create a task with defaults, allowing overrides.

    Args:
        user_id: User ID who owns this task (required)
        title: Task title (required)
        deadline: Task deadline (required)
        notes: Task notes
        bucket: Initial column (defaults to later)
        tags: Tags, at most one per category
        reminder_frequency: Reminder cadence (defaults to hourly)
        recurrence: Recurrence settings for recurring tasks
        now: Creation timestamp (defaults to current local time)

    Returns:
        Task object with defaults applied
    """
    now = now or datetime.now()
    defaults = create_task_defaults()

    return Task(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=title,
        notes=notes if notes is not None else defaults["notes"],
        deadline=deadline,
        bucket=bucket if bucket is not None else defaults["bucket"],
        created_at=now,
        updated_at=now,
        completed_at=defaults["completed_at"],
        delegated_to=defaults["delegated_to"],
        reminder_frequency=reminder_frequency if reminder_frequency is not None else defaults["reminder_frequency"],
        last_reminded_at=defaults["last_reminded_at"],
        escalation_level=defaults["escalation_level"],
        tags=tags if tags is not None else defaults["tags"],
        recurrence=recurrence if recurrence is not None else defaults["recurrence"],
    )


def create_recurrence_successor(task: Task, deadline: datetime, now: Optional[datetime] = None) -> Task:
    """Create the next instance of a completed recurring task.

    Successors always start in the later bucket with a fresh reminder state,
    regardless of how close the new deadline is.
    """
    return create_task_base(
        user_id=task.user_id,
        title=task.title,
        deadline=deadline,
        notes=task.notes,
        bucket=Bucket.LATER,
        tags=list(task.tags),
        reminder_frequency=task.reminder_frequency,
        recurrence=task.recurrence,
        now=now,
    )
