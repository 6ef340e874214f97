"""Per-user settings and suppression state for accountabot."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class SuppressionWindow(BaseModel):
    """A time-bounded suppression (focus or vacation).

    The window is active while its end lies strictly in the future.
    """

    until: Optional[datetime] = None

    def is_active_at(self, now: datetime) -> bool:
        return self.until is not None and self.until > now


class UserSettings(BaseModel):
    """User settings model (one row per user, created on first access)."""

    user_id: str = Field(..., description="Owning user ID")
    telegram_chat_id: Optional[str] = Field(None, description="Delivery target (linked chat)")
    focus_until: Optional[datetime] = Field(None, description="Reminders suppressed until this time")
    vacation_until: Optional[datetime] = Field(
        None, description="Reminders, morning commitment and daily summary suppressed until this time"
    )
    last_commitment_date: Optional[str] = Field(
        None, description="Calendar day (YYYY-MM-DD) of the last morning commitment"
    )
    committed_task_ids: List[str] = Field(default_factory=list, description="Tasks committed to this morning")
    dismissed_stale_task_ids: List[str] = Field(
        default_factory=list, description="Tasks skipped from stale-task confrontation"
    )
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    @property
    def focus_window(self) -> SuppressionWindow:
        return SuppressionWindow(until=self.focus_until)

    @property
    def vacation_window(self) -> SuppressionWindow:
        return SuppressionWindow(until=self.vacation_until)

    def has_delivery_target(self) -> bool:
        return bool(self.telegram_chat_id)
