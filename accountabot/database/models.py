"""SQLAlchemy database models for accountabot."""

from datetime import datetime
from typing import Type, TypeVar, Union
import uuid
from sqlalchemy import Column, String, Integer, DateTime, JSON

from accountabot.database.database import Base
from accountabot.models.task import Bucket, ReminderFrequency

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T, None]) -> Union[str, None]:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance, string value or None

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if enum_obj is None:
        return None
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)

    title = Column(String, nullable=False)
    notes = Column(String, nullable=False, default="")
    deadline = Column(DateTime, nullable=False)
    column_type = Column(String, nullable=False, default=Bucket.LATER.value, index=True)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)
    completed_at = Column(DateTime, nullable=True)

    delegated_to = Column(String, nullable=True)

    # Reminder state
    reminder_frequency = Column(String, nullable=False, default=ReminderFrequency.HOURLY.value)
    last_reminded_at = Column(DateTime, nullable=True)
    escalation_level = Column(Integer, nullable=False, default=0)

    # Tags (stored as JSON array of {id, label, type})
    tags = Column(JSON, nullable=False, default=list)

    # Recurrence (all NULL for one-off tasks)
    recurrence_pattern = Column(String, nullable=True)
    recurrence_end_date = Column(DateTime, nullable=True)
    recurrence_day_of_week = Column(Integer, nullable=True)
    recurrence_day_of_month = Column(Integer, nullable=True)

    def _recurrence_to_pydantic(self):
        from accountabot.models.task import RecurrenceConfig

        if not self.recurrence_pattern:
            return None
        return RecurrenceConfig(
            pattern=self.recurrence_pattern,
            end_date=self.recurrence_end_date,
            day_of_week=self.recurrence_day_of_week,
            day_of_month=self.recurrence_day_of_month,
        )

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from accountabot.models.task import Task, TaskTag

        return Task(
            id=self.id,
            user_id=self.user_id,
            title=self.title,
            notes=self.notes or "",
            deadline=self.deadline,
            bucket=value_to_enum(self.column_type, Bucket, Bucket.LATER),
            created_at=self.created_at,
            updated_at=self.updated_at,
            completed_at=self.completed_at,
            delegated_to=self.delegated_to,
            reminder_frequency=value_to_enum(self.reminder_frequency, ReminderFrequency, ReminderFrequency.HOURLY),
            last_reminded_at=self.last_reminded_at,
            escalation_level=self.escalation_level or 0,
            tags=[TaskTag.model_validate(tag) for tag in (self.tags or [])],
            recurrence=self._recurrence_to_pydantic(),
        )

    def apply_pydantic(self, task) -> None:
        """Copy every mutable field from a Pydantic Task onto this row."""
        recurrence = task.recurrence
        self.title = task.title
        self.notes = task.notes
        self.deadline = task.deadline
        # Pydantic with use_enum_values=True returns strings
        self.column_type = enum_to_value(task.bucket)
        self.updated_at = task.updated_at
        self.completed_at = task.completed_at
        self.delegated_to = task.delegated_to
        self.reminder_frequency = enum_to_value(task.reminder_frequency)
        self.last_reminded_at = task.last_reminded_at
        self.escalation_level = task.escalation_level
        self.tags = [tag.model_dump() for tag in task.tags]
        self.recurrence_pattern = enum_to_value(recurrence.pattern) if recurrence else None
        self.recurrence_end_date = recurrence.end_date if recurrence else None
        self.recurrence_day_of_week = recurrence.day_of_week if recurrence else None
        self.recurrence_day_of_month = recurrence.day_of_month if recurrence else None

    @classmethod
    def from_pydantic(cls, task):
        """Create database model from Pydantic model."""
        task_db = cls(id=task.id, user_id=task.user_id, created_at=task.created_at)
        task_db.apply_pydantic(task)
        return task_db


class UserSettingsDB(Base):
    """Database model for UserSettings."""

    __tablename__ = "user_settings"

    user_id = Column(String, primary_key=True)

    # Linked Telegram chat (delivery target)
    telegram_chat_id = Column(String, nullable=True, unique=True, index=True)

    # Suppression windows
    focus_mode_until = Column(DateTime, nullable=True)
    vacation_mode_until = Column(DateTime, nullable=True)

    # Morning commitment / stale-task confrontation
    last_commitment_date = Column(String, nullable=True)
    committed_task_ids = Column(JSON, nullable=False, default=list)
    dismissed_stale_task_ids = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from accountabot.models.user_settings import UserSettings

        return UserSettings(
            user_id=self.user_id,
            telegram_chat_id=self.telegram_chat_id,
            focus_until=self.focus_mode_until,
            vacation_until=self.vacation_mode_until,
            last_commitment_date=self.last_commitment_date,
            committed_task_ids=list(self.committed_task_ids or []),
            dismissed_stale_task_ids=list(self.dismissed_stale_task_ids or []),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def apply_pydantic(self, settings) -> None:
        self.telegram_chat_id = settings.telegram_chat_id
        self.focus_mode_until = settings.focus_until
        self.vacation_mode_until = settings.vacation_until
        self.last_commitment_date = settings.last_commitment_date
        self.committed_task_ids = list(settings.committed_task_ids)
        self.dismissed_stale_task_ids = list(settings.dismissed_stale_task_ids)
        self.updated_at = settings.updated_at

    @classmethod
    def from_pydantic(cls, settings):
        """Create database model from Pydantic model."""
        settings_db = cls(user_id=settings.user_id, created_at=settings.created_at)
        settings_db.apply_pydantic(settings)
        return settings_db
