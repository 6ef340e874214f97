"""Request/response models for the Telegram webhook and sweep endpoints."""

from typing import Optional

from pydantic import BaseModel, Field


class TelegramChat(BaseModel):
    id: int
    type: Optional[str] = None


class TelegramUser(BaseModel):
    id: int
    first_name: Optional[str] = None
    username: Optional[str] = None


class TelegramMessage(BaseModel):
    """The subset of a Telegram message the bot reads."""
    message_id: int
    chat: TelegramChat
    from_user: Optional[TelegramUser] = Field(None, alias="from")
    text: Optional[str] = None


class TelegramUpdate(BaseModel):
    """Incoming webhook payload. Non-message updates carry no `message`."""
    update_id: int
    message: Optional[TelegramMessage] = None


class WebhookResponse(BaseModel):
    ok: bool = True


class SweepResponse(BaseModel):
    """Totals of one reminder or daily-summary sweep."""
    processed_user_count: int
    sent_count: int
    error_count: int
    timestamp: str = Field(..., description="Sweep start time (ISO 8601)")
