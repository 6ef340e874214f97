"""FastAPI web application for accountabot."""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from accountabot.api.telegram_models import SweepResponse, TelegramMessage, TelegramUpdate, WebhookResponse
from accountabot.auth.dependencies import verify_reminder_secret
from accountabot.database.database import get_db
from accountabot.database.repository import TaskRepository
from accountabot.database.user_settings_repository import UserSettingsRepository
from accountabot.engine.accountability import (
    enter_focus_mode,
    enter_vacation_mode,
    exit_focus_mode,
    exit_vacation_mode,
)
from accountabot.engine.columns import classify_deadline
from accountabot.engine.reminders import MessageTransport, run_daily_summary, run_reminder_sweep
from accountabot.integrations.telegram import TelegramClient
from accountabot.messaging import formatter
from accountabot.models.constants import DEFAULT_FOCUS_MINUTES, DEFAULT_VACATION_DAYS
from accountabot.models.task_factory import create_task_base
from accountabot.parsing.task_parser import parse_task_message

logger = logging.getLogger(__name__)

app = FastAPI(
    title="accountabot API",
    description="Telegram accountability bot: turns chat messages into tasks and nags until they are done",
    version="0.1.0"
)


def get_transport() -> Optional[MessageTransport]:
    """Delivery transport, or None when Telegram credentials are missing."""
    try:
        return TelegramClient()
    except ValueError as e:
        logger.error(f"Telegram transport unavailable: {str(e)}")
        return None


def _require_transport(transport: Optional[MessageTransport]) -> MessageTransport:
    if transport is None:
        raise HTTPException(status_code=500, detail="Telegram bot token is not configured")
    return transport


def _positive_int(args: List[str], default: int) -> int:
    if args:
        try:
            value = int(args[0])
        except ValueError:
            return default
        if value > 0:
            return value
    return default


class WebhookContext:
    """Everything a chat command handler needs."""

    def __init__(self, message: TelegramMessage, db: Session, now: datetime):
        self.message = message
        self.chat_id = str(message.chat.id)
        self.now = now
        self.tasks = TaskRepository(db)
        self.settings = UserSettingsRepository(db)

    @property
    def display_name(self) -> str:
        user = self.message.from_user
        if user and user.first_name:
            return user.first_name
        return "there"


def _handle_start(ctx: WebhookContext, args: List[str]) -> str:
    if not args:
        return formatter.format_welcome_message()
    try:
        ctx.settings.link_chat(args[0], ctx.chat_id, ctx.now)
    except SQLAlchemyError as e:
        logger.error(f"Failed to link chat {ctx.chat_id}: {type(e).__name__}: {str(e)}")
        return formatter.format_connect_failed_message()
    logger.info(f"Linked chat {ctx.chat_id} to user {args[0]}")
    return formatter.format_connected_message(ctx.display_name)


def _handle_status(ctx: WebhookContext, args: List[str]) -> str:
    return formatter.format_status_message(ctx.settings.get_by_chat_id(ctx.chat_id) is not None)


def _handle_disconnect(ctx: WebhookContext, args: List[str]) -> str:
    if not ctx.settings.unlink_chat(ctx.chat_id, ctx.now):
        return formatter.format_not_connected_message()
    logger.info(f"Unlinked chat {ctx.chat_id}")
    return formatter.format_disconnected_message()


def _handle_help(ctx: WebhookContext, args: List[str]) -> str:
    return formatter.format_help_message()


def _handle_focus(ctx: WebhookContext, args: List[str]) -> str:
    settings = ctx.settings.get_by_chat_id(ctx.chat_id)
    if settings is None:
        return formatter.format_not_connected_message()
    minutes = _positive_int(args, DEFAULT_FOCUS_MINUTES)
    settings = ctx.settings.update(enter_focus_mode(settings, minutes, ctx.now))
    return formatter.format_focus_message(settings.focus_until)


def _handle_vacation(ctx: WebhookContext, args: List[str]) -> str:
    settings = ctx.settings.get_by_chat_id(ctx.chat_id)
    if settings is None:
        return formatter.format_not_connected_message()
    days = _positive_int(args, DEFAULT_VACATION_DAYS)
    settings = ctx.settings.update(enter_vacation_mode(settings, days, ctx.now))
    return formatter.format_vacation_message(settings.vacation_until)


def _handle_resume(ctx: WebhookContext, args: List[str]) -> str:
    settings = ctx.settings.get_by_chat_id(ctx.chat_id)
    if settings is None:
        return formatter.format_not_connected_message()
    settings = exit_vacation_mode(exit_focus_mode(settings, ctx.now), ctx.now)
    ctx.settings.update(settings)
    return formatter.format_resumed_message()


COMMAND_HANDLERS: Dict[str, Callable[[WebhookContext, List[str]], str]] = {
    "/start": _handle_start,
    "/status": _handle_status,
    "/disconnect": _handle_disconnect,
    "/help": _handle_help,
    "/focus": _handle_focus,
    "/vacation": _handle_vacation,
    "/resume": _handle_resume,
}


def _handle_command(ctx: WebhookContext, text: str) -> str:
    parts = text.split()
    # Group chats address commands as /cmd@botname
    command = parts[0].split("@", 1)[0].lower()
    handler = COMMAND_HANDLERS.get(command, _handle_help)
    return handler(ctx, parts[1:])


def _handle_task_message(ctx: WebhookContext, text: str) -> str:
    settings = ctx.settings.get_by_chat_id(ctx.chat_id)
    if settings is None:
        return formatter.format_not_connected_message()

    result = parse_task_message(text, ctx.now)
    if not result.success:
        return formatter.format_parse_error(result)

    intent = result.task
    bucket = classify_deadline(intent.deadline, ctx.now)
    task = create_task_base(
        user_id=settings.user_id,
        title=intent.title,
        deadline=intent.deadline,
        bucket=bucket,
        tags=intent.tags,
        now=ctx.now,
    )
    try:
        ctx.tasks.create(task)
    except SQLAlchemyError:
        return formatter.format_database_error()

    logger.info(f"Created task {task.id} from chat {ctx.chat_id} in {bucket.value}")
    return formatter.format_task_confirmation(intent, bucket, result.warning, ctx.now)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.post("/telegram/webhook", response_model=WebhookResponse)
def telegram_webhook(
    update: TelegramUpdate,
    db: Session = Depends(get_db),
    transport: Optional[MessageTransport] = Depends(get_transport),
):
    """Handle a Telegram update.

    Always answers ok so Telegram does not redeliver the update.
    """
    message = update.message
    if message is None or not message.text:
        return WebhookResponse()

    ctx = WebhookContext(message, db, datetime.now())
    text = message.text.strip()
    is_command = text.startswith("/")
    try:
        if is_command:
            reply = _handle_command(ctx, text)
        else:
            reply = _handle_task_message(ctx, text)
    except (SQLAlchemyError, ValueError) as e:
        # ValueError: the settings row vanished between lookup and update
        logger.error(f"Failed to handle update {update.update_id}: {type(e).__name__}: {str(e)}")
        reply = formatter.format_command_error() if is_command else formatter.format_database_error()

    if transport is None:
        logger.error(f"Dropping reply to chat {ctx.chat_id}: no transport configured")
    else:
        transport.send(ctx.chat_id, reply)
    return WebhookResponse()


@app.post("/reminders/process", response_model=SweepResponse, dependencies=[Depends(verify_reminder_secret)])
def process_reminders(
    db: Session = Depends(get_db),
    transport: Optional[MessageTransport] = Depends(get_transport),
):
    """Run one reminder sweep over every linked user."""
    transport = _require_transport(transport)
    result = run_reminder_sweep(TaskRepository(db), UserSettingsRepository(db), transport)
    return result.to_dict()


@app.post("/reminders/daily-summary", response_model=SweepResponse, dependencies=[Depends(verify_reminder_secret)])
def send_daily_summary(
    db: Session = Depends(get_db),
    transport: Optional[MessageTransport] = Depends(get_transport),
):
    """Send the daily digest to every linked user not on vacation."""
    transport = _require_transport(transport)
    result = run_daily_summary(TaskRepository(db), UserSettingsRepository(db), transport)
    return result.to_dict()
