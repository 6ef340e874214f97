"""User-facing chat copy (Telegram HTML parse mode).

Every function is deterministic given its inputs; "now" is always passed in
where the copy depends on it.
"""

from datetime import datetime
from html import escape
from typing import Optional

from accountabot.models.constants import MAX_ESCALATION_LEVEL
from accountabot.models.task import Bucket
from accountabot.parsing.deadline import Confidence
from accountabot.parsing.task_parser import ParseResult, ParsedTaskIntent


COLUMN_NAMES = {
    Bucket.TODAY: "Today",
    Bucket.THIS_WEEK: "This Week",
    Bucket.LATER: "Later",
    Bucket.DONE: "Done",
}

COLUMN_EMOJIS = {
    Bucket.TODAY: "🔴",
    Bucket.THIS_WEEK: "🟡",
    Bucket.LATER: "🟢",
    Bucket.DONE: "✅",
}

EXAMPLE_PHRASINGS = [
    "Buy groceries tomorrow",
    "Call mom Friday at 3pm",
    "Submit report by Jan 20th #work",
]


def _plural(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"


def _format_clock(value: datetime) -> str:
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def _format_short_date(value: datetime) -> str:
    return f"{value:%b} {value.day}"


def format_deadline_for_chat(deadline: datetime, now: datetime) -> str:
    """Relative deadline text: "Today at 3:00 PM", "Friday", "3 days overdue"."""
    diff_days = (deadline.date() - now.date()).days
    has_time = not (deadline.hour == 23 and deadline.minute == 59)
    time_str = f" at {_format_clock(deadline)}" if has_time else ""

    if diff_days < 0:
        overdue = abs(diff_days)
        return f"{overdue} {_plural(overdue, 'day')} overdue"
    if diff_days == 0:
        return f"Today{time_str}"
    if diff_days == 1:
        return f"Tomorrow{time_str}"
    if diff_days <= 7:
        return f"{deadline:%A}{time_str}"
    return f"{_format_short_date(deadline)}{time_str}"


def format_reminder_message(level: int, task_title: str, deadline: datetime, now: datetime) -> str:
    """Escalating reminder copy; levels outside 1..3 are clamped."""
    level = min(max(level, 1), MAX_ESCALATION_LEVEL)
    title = escape(task_title)
    if deadline < now:
        status = "⏰ OVERDUE"
    else:
        status = f"Due: {deadline.month}/{deadline.day}/{deadline.year}"

    if level == 1:
        return (
            f"📋 <b>Friendly Reminder</b>\n\n"
            f"Hey! You said you'd work on:\n<b>{title}</b>\n\n"
            f"{status}\n\nReady to start?"
        )
    if level == 2:
        return (
            f"⚠️ <b>Task Waiting</b>\n\n"
            f"This task is still waiting:\n<b>{title}</b>\n\n"
            f"{status}\n\nWhat's blocking you?"
        )
    return (
        f"🚨 <b>Urgent: Action Required!</b>\n\n"
        f"This task needs your attention NOW:\n<b>{title}</b>\n\n"
        f"{status}\n\nDeal with it or reschedule!"
    )


def format_daily_summary(pending_count: int, overdue_count: int, completed_today: int) -> str:
    message = "📊 <b>Daily Summary</b>\n\n"
    if overdue_count > 0:
        message += f"🚨 <b>{overdue_count}</b> overdue {_plural(overdue_count, 'task')}\n"
    message += f"📋 <b>{pending_count}</b> pending {_plural(pending_count, 'task')}\n"
    message += f"✅ <b>{completed_today}</b> completed today\n\n"

    if overdue_count > 0:
        message += "⚡ Time to take action on those overdue tasks!"
    elif pending_count > 0:
        message += "💪 You've got this! Focus on your top priority."
    else:
        message += "🎉 All caught up! Great job!"
    return message


def format_task_confirmation(
    task: ParsedTaskIntent,
    bucket: Bucket,
    warning: Optional[str],
    now: datetime,
) -> str:
    bucket = Bucket(bucket)
    tag_text = ""
    if task.tags:
        tag_text = "\n🏷️ Tags: " + ", ".join(tag.label for tag in task.tags)
    confidence_note = ""
    if task.confidence == Confidence.LOW:
        confidence_note = "\n\n<i>📅 No deadline detected - defaulting to today</i>"
    warning_text = f"\n\n⚠️ {escape(warning)}" if warning else ""

    return (
        "✅ <b>Task Created!</b>\n\n"
        f"📝 {escape(task.title)}\n"
        f"📅 {format_deadline_for_chat(task.deadline, now)}\n"
        f"📊 Column: {COLUMN_EMOJIS[bucket]} {COLUMN_NAMES[bucket]}"
        f"{tag_text}{confidence_note}{warning_text}\n\n"
        "<i>View in app to edit details</i>"
    )


def format_parse_error(result: ParseResult) -> str:
    message = "❌ <b>Couldn't create task</b>\n\n"
    if result.message:
        message += f"{result.message}\n\n"
    message += "<b>Try formats like:</b>\n"
    message += "\n".join(f'• "{example}"' for example in EXAMPLE_PHRASINGS)
    message += "\n\n<i>Send /help for more examples</i>"
    return message


def format_help_message() -> str:
    return """📚 <b>Task Creation Help</b>

<b>Create tasks by sending a message:</b>
• "Buy groceries tomorrow"
• "Call mom on Friday"
• "Meeting at 3pm next Monday"
• "Submit report by Jan 20 #work"
• "Pagar contas amanhã #trabalho"

<b>Supported tags:</b>
#management #design #development
#research #marketing

<b>Tag shortcuts:</b>
#work #dev #code #ui #learn

<b>Date formats:</b>
• "tomorrow", "today"
• "next Monday", "this Friday"
• "in 3 days", "in 2 weeks"
• "January 20th", "Jan 20"
• Times: "at 3pm", "at 14:00"

<b>Commands:</b>
/status - Check connection status
/focus [minutes] - Pause reminders while you focus
/vacation [days] - Pause reminders and summaries
/resume - End focus and vacation mode
/disconnect - Unlink your account
/help - Show this message"""


def format_database_error() -> str:
    return """❌ <b>Failed to create task</b>

Something went wrong while saving your task. Please try again.

If the problem persists, try creating the task directly in the app."""


def format_command_error() -> str:
    return """❌ <b>Something went wrong</b>

Your command could not be completed. Please try again in a moment."""


def format_not_connected_message() -> str:
    return """❌ <b>Account not connected</b>

Your Telegram is not linked to any account.

Please use the "Connect Telegram" button in the app to link your account first."""


def format_welcome_message() -> str:
    return """👋 <b>Welcome to Accountability Bot!</b>

To connect your account, please use the "Connect Telegram" button in the app.

This will link your Telegram to receive task reminders."""


def format_connected_message(display_name: str) -> str:
    return (
        "✅ <b>Connected successfully!</b>\n\n"
        f"Hey {escape(display_name)}! Your Telegram is now linked to Accountability.\n\n"
        "You'll receive:\n• Task reminders\n• Daily summaries\n• Overdue alerts\n\n"
        "Stay productive! 💪"
    )


def format_connect_failed_message() -> str:
    return "❌ Failed to connect. Please try again from the app."


def format_status_message(connected: bool) -> str:
    if connected:
        return "✅ Your Telegram is connected and active!"
    return "❌ Your Telegram is not connected. Use the app to connect."


def format_disconnected_message() -> str:
    return "👋 Disconnected! You will no longer receive reminders."


def format_focus_message(until: datetime) -> str:
    return f"🎯 Focus mode on. Reminders paused until {_format_clock(until)}."


def format_vacation_message(until: datetime) -> str:
    return f"🏖️ Vacation mode on. Reminders and summaries paused until {_format_short_date(until)}."


def format_resumed_message() -> str:
    return "🔔 Welcome back! Reminders are active again."
