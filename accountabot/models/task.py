"""Task data model for accountabot."""

from datetime import datetime
from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field


class Bucket(str, Enum):
    """Active lifecycle stage of a task (kanban column)."""
    TODAY = "today"
    THIS_WEEK = "this_week"
    LATER = "later"
    DONE = "done"  # Terminal for the instance; recurring tasks spawn a successor


class ReminderFrequency(str, Enum):
    """Minimum re-notify interval for a task."""
    HOURLY = "hourly"
    FEW_HOURS = "few_hours"
    TWICE_DAILY = "twice_daily"


class TagCategory(str, Enum):
    """Fixed tag taxonomy."""
    MANAGEMENT = "management"
    DESIGN = "design"
    DEVELOPMENT = "development"
    RESEARCH = "research"
    MARKETING = "marketing"


class RecurrencePattern(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


TAG_LABELS = {
    TagCategory.MANAGEMENT: "Management",
    TagCategory.DESIGN: "Design",
    TagCategory.DEVELOPMENT: "Development",
    TagCategory.RESEARCH: "Research",
    TagCategory.MARKETING: "Marketing",
}


class TaskTag(BaseModel):
    """A tag attached to a task (at most one per category)."""

    id: str = Field(..., description="Tag identifier (same as the category value)")
    label: str = Field(..., description="Display label")
    type: TagCategory = Field(..., description="Tag category")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @classmethod
    def for_category(cls, category: TagCategory) -> "TaskTag":
        category = TagCategory(category)
        return cls(id=category.value, label=TAG_LABELS[category], type=category)


class RecurrenceConfig(BaseModel):
    """Recurrence settings of a recurring task.

    Notes:
    - day_of_week follows the Sunday=0 .. Saturday=6 convention.
    - day_of_month is clamped to the last valid day of shorter months.
    """

    pattern: RecurrencePattern
    end_date: Optional[datetime] = Field(None, description="No occurrence is created after this instant")
    day_of_week: Optional[int] = Field(None, ge=0, le=6, description="Weekly target weekday (0=Sunday)")
    day_of_month: Optional[int] = Field(None, ge=1, le=31, description="Monthly target day of month")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class Task(BaseModel):
    """Canonical Task model."""

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this task")
    title: str = Field(..., min_length=1, description="Task title")
    notes: str = Field("", description="Task notes")
    deadline: datetime = Field(..., description="Task deadline (naive local time)")
    bucket: Bucket = Field(Bucket.LATER, description="Kanban column")
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task last update timestamp")
    completed_at: Optional[datetime] = Field(None, description="Set while the task is in the done bucket")
    delegated_to: Optional[str] = Field(None, description="Third party the task is blocked on")
    reminder_frequency: ReminderFrequency = Field(ReminderFrequency.HOURLY, description="Reminder cadence")
    last_reminded_at: Optional[datetime] = Field(None, description="Last successful reminder delivery")
    escalation_level: int = Field(0, ge=0, le=3, description="0 = never reminded, 3 = urgent")
    tags: List[TaskTag] = Field(default_factory=list, description="At most one tag per category")
    recurrence: Optional[RecurrenceConfig] = Field(None, description="Present only on recurring tasks")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    def is_done(self) -> bool:
        return self.bucket == Bucket.DONE

    def is_overdue(self, now: datetime) -> bool:
        """Overdue compares exact instants, not calendar days."""
        return self.deadline < now
