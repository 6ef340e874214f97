"""Repository layer for database operations."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc

from accountabot.models.task import Bucket, Task
from accountabot.database.models import TaskDB

logger = logging.getLogger(__name__)


def _matches(column, value):
    """Equality filter that also matches NULL."""
    return column.is_(None) if value is None else column == value


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, task: Task) -> Task:
        """Create a new task."""
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, task_id: str) -> Optional[Task]:
        """Get task by ID for a specific user."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        ).first()
        return task_db.to_pydantic() if task_db else None

    def get_all(self, user_id: str) -> List[Task]:
        """Get all tasks for a user sorted by creation date (newest first)."""
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.user_id == user_id,
        ).order_by(desc(TaskDB.created_at)).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def get_active(self, user_id: str) -> List[Task]:
        """Get all tasks for a user that are not in the done column."""
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.user_id == user_id,
            TaskDB.column_type != Bucket.DONE.value,
        ).order_by(TaskDB.deadline).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def update(self, task: Task) -> Task:
        """Update an existing task (user_id must match task.user_id)."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task.id,
            TaskDB.user_id == task.user_id,
        ).first()
        if not task_db:
            raise ValueError(f"Task {task.id} not found")

        task_db.apply_pydantic(task)

        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: str, task_id: str) -> bool:
        """Permanently delete a task by ID for a specific user."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        ).first()
        if not task_db:
            return False

        try:
            self.db.delete(task_db)
            self.db.commit()
            logger.debug(f"Deleted task {task_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def _conditional_update(self, task_id: str, expected: dict, values: dict) -> bool:
        """Update one task only if its reminder state still matches `expected`.

        Returns True when exactly one row changed.
        """
        try:
            affected = self.db.query(TaskDB).filter(
                TaskDB.id == task_id,
                *[_matches(getattr(TaskDB, name), value) for name, value in expected.items()],
            ).update(values, synchronize_session=False)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update reminder state of task {task_id}: {type(e).__name__}: {str(e)}")
            raise
        return affected == 1

    def claim_reminder(
        self,
        task_id: str,
        *,
        expected_last_reminded_at: Optional[datetime],
        expected_level: int,
        reminded_at: datetime,
        new_level: int,
    ) -> bool:
        """Record a reminder as sent before delivering it.

        Fails (returns False) if another sweep already moved the task's
        reminder state since it was read.
        """
        return self._conditional_update(
            task_id,
            {"last_reminded_at": expected_last_reminded_at, "escalation_level": expected_level},
            {"last_reminded_at": reminded_at, "escalation_level": new_level},
        )

    def release_reminder(
        self,
        task_id: str,
        *,
        claimed_at: datetime,
        claimed_level: int,
        previous_last_reminded_at: Optional[datetime],
        previous_level: int,
    ) -> bool:
        """Undo a claim whose delivery failed, unless the state moved on since."""
        return self._conditional_update(
            task_id,
            {"last_reminded_at": claimed_at, "escalation_level": claimed_level},
            {"last_reminded_at": previous_last_reminded_at, "escalation_level": previous_level},
        )
