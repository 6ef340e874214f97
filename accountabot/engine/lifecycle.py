"""Task lifecycle transitions: column moves, reschedules, delegation.

Completing a recurring task spawns at most one successor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from accountabot.database.repository import TaskRepository
from accountabot.engine.recurrence import next_occurrence
from accountabot.models.task import Bucket, Task
from accountabot.models.task_factory import create_recurrence_successor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MoveResult:
    task: Task
    successor: Optional[Task] = None


def move_task(task: Task, bucket: Bucket, now: Optional[datetime] = None) -> MoveResult:
    """Move a task to another bucket.

    Entering done stamps completed_at (and, for recurring tasks, builds the
    successor); leaving done clears completed_at.
    """
    now = now or datetime.now()
    bucket = Bucket(bucket)
    was_done = task.is_done()

    update = {"bucket": bucket, "updated_at": now}
    if bucket == Bucket.DONE and not was_done:
        update["completed_at"] = now
    elif bucket != Bucket.DONE and was_done:
        update["completed_at"] = None
    moved = task.model_copy(update=update)

    successor = None
    if bucket == Bucket.DONE and not was_done and task.recurrence is not None:
        next_deadline = next_occurrence(task.recurrence, task.deadline, now)
        if next_deadline is None:
            logger.debug(f"Recurrence ended for task {task.id}")
        else:
            successor = create_recurrence_successor(task, next_deadline, now)

    return MoveResult(task=moved, successor=successor)


def reschedule_task(task: Task, deadline: datetime, now: Optional[datetime] = None) -> Task:
    """Set a new deadline and reset the escalation state."""
    now = now or datetime.now()
    return task.model_copy(
        update={
            "deadline": deadline,
            "escalation_level": 0,
            "last_reminded_at": None,
            "updated_at": now,
        }
    )


def delegate_task(task: Task, delegated_to: Optional[str], now: Optional[datetime] = None) -> Task:
    """Mark a task as blocked on a third party (None clears it)."""
    now = now or datetime.now()
    value = (delegated_to or "").strip() or None
    return task.model_copy(update={"delegated_to": value, "updated_at": now})


def apply_move(
    repo: TaskRepository,
    user_id: str,
    task_id: str,
    bucket: Bucket,
    now: Optional[datetime] = None,
) -> Optional[MoveResult]:
    """Persist a column move and the recurrence successor it produces.

    Returns None if the task does not exist for this user.
    """
    task = repo.get(user_id, task_id)
    if task is None:
        return None

    result = move_task(task, bucket, now)
    updated = repo.update(result.task)
    successor = repo.create(result.successor) if result.successor is not None else None
    if successor is not None:
        logger.info(f"Spawned recurrence successor {successor.id} for task {task_id}")
    return MoveResult(task=updated, successor=successor)
