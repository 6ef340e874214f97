"""Reminder evaluation and the periodic reminder / daily-summary sweeps.

The sweeps have no internal timer: an external scheduler calls them (via the
API) at a fixed cadence. Escalation per task goes 0 -> 1 (gentle) -> 2 (firm)
-> 3 (urgent) and stays at 3 until the task is rescheduled.

Overlapping sweeps are made safe by claiming a task's reminder state with a
conditional update before delivering, and releasing it if delivery fails.
Delivery is at-most-once: if the release write itself fails, the claimed
state stays committed (the task advances one level with nothing delivered).
That case is logged and counted as an error; the next sweep retries after the
reminder interval.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional, Protocol, Tuple

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError

from accountabot.database.repository import TaskRepository
from accountabot.database.user_settings_repository import UserSettingsRepository
from accountabot.engine.accountability import is_reminder_suppressed, is_summary_suppressed
from accountabot.messaging.formatter import format_daily_summary, format_reminder_message
from accountabot.models.constants import MAX_ESCALATION_LEVEL, REMINDER_INTERVALS
from accountabot.models.task import Bucket, ReminderFrequency, Task
from accountabot.models.user_settings import UserSettings

load_dotenv()

logger = logging.getLogger(__name__)


class MessageTransport(Protocol):
    def send(self, chat_id: str, text: str) -> bool:
        ...


@dataclass(frozen=True)
class ReminderDecision:
    should_fire: bool
    next_level: int
    reason: str


class DeliveryOutcome(str, Enum):
    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"  # another sweep already claimed this reminder


@dataclass
class SweepResult:
    """Totals for one sweep invocation."""
    timestamp: datetime
    processed_user_count: int = 0
    sent_count: int = 0
    error_count: int = 0

    def to_dict(self) -> dict:
        return {
            "processed_user_count": self.processed_user_count,
            "sent_count": self.sent_count,
            "error_count": self.error_count,
            "timestamp": self.timestamp.isoformat(),
        }


def remind_delegated_default() -> bool:
    return os.getenv("REMIND_DELEGATED_TASKS", "True").lower() == "true"


def reminder_interval(frequency: ReminderFrequency) -> timedelta:
    return REMINDER_INTERVALS[ReminderFrequency(frequency)]


def next_escalation_level(level: int) -> int:
    return min(level + 1, MAX_ESCALATION_LEVEL)


def evaluate_task(
    task: Task,
    now: datetime,
    settings: Optional[UserSettings],
    remind_delegated: bool = True,
) -> ReminderDecision:
    """Decide whether a reminder should go out for this task right now.

    Args:
        task: Task to evaluate
        now: Evaluation time
        settings: Owner's settings (None means no delivery target)
        remind_delegated: Whether tasks delegated to someone else keep escalating

    Returns:
        ReminderDecision with the level the reminder would be sent at
    """
    next_level = next_escalation_level(task.escalation_level)

    def skip(reason: str) -> ReminderDecision:
        return ReminderDecision(should_fire=False, next_level=next_level, reason=reason)

    if task.is_done():
        return skip("done")
    if settings is None or not settings.has_delivery_target():
        return skip("no_delivery_target")
    if settings.vacation_window.is_active_at(now):
        return skip("vacation")
    if settings.focus_window.is_active_at(now):
        return skip("focus")
    if task.delegated_to and not remind_delegated:
        return skip("delegated")
    if task.bucket != Bucket.TODAY and not task.is_overdue(now):
        return skip("not_due")
    if task.last_reminded_at is not None and now - task.last_reminded_at < reminder_interval(task.reminder_frequency):
        return skip("interval")

    return ReminderDecision(should_fire=True, next_level=next_level, reason="due")


def apply_delivery(task: Task, decision: ReminderDecision, now: datetime) -> Task:
    """Task state after a confirmed delivery."""
    return task.model_copy(update={"last_reminded_at": now, "escalation_level": decision.next_level})


def deliver_reminder(
    task_repo: TaskRepository,
    transport: MessageTransport,
    chat_id: str,
    task: Task,
    decision: ReminderDecision,
    now: datetime,
) -> DeliveryOutcome:
    """Claim, deliver, and release on failure.

    Raises SQLAlchemyError if the claim write fails; nothing is delivered then.
    """
    claimed = task_repo.claim_reminder(
        task.id,
        expected_last_reminded_at=task.last_reminded_at,
        expected_level=task.escalation_level,
        reminded_at=now,
        new_level=decision.next_level,
    )
    if not claimed:
        logger.info(f"Reminder for task {task.id} already claimed by another sweep")
        return DeliveryOutcome.SKIPPED

    message = format_reminder_message(decision.next_level, task.title, task.deadline, now)
    if transport.send(chat_id, message):
        return DeliveryOutcome.SENT

    logger.warning(f"Failed to deliver reminder for task {task.id}; releasing claim")
    try:
        task_repo.release_reminder(
            task.id,
            claimed_at=now,
            claimed_level=decision.next_level,
            previous_last_reminded_at=task.last_reminded_at,
            previous_level=task.escalation_level,
        )
    except SQLAlchemyError as e:
        logger.error(
            f"Failed to release reminder claim for task {task.id}; level {decision.next_level} "
            f"stays recorded without delivery: {type(e).__name__}: {str(e)}"
        )
    return DeliveryOutcome.FAILED


def run_reminder_sweep(
    task_repo: TaskRepository,
    settings_repo: UserSettingsRepository,
    transport: MessageTransport,
    now: Optional[datetime] = None,
    remind_delegated: Optional[bool] = None,
) -> SweepResult:
    """Evaluate every active task of every reachable user and send due reminders.

    Users in focus or vacation are skipped and not counted as processed. A
    failure fetching one user's tasks is logged and counted without aborting
    the sweep.
    """
    now = now or datetime.now()
    if remind_delegated is None:
        remind_delegated = remind_delegated_default()
    result = SweepResult(timestamp=now)

    for settings in settings_repo.list_with_delivery_target():
        if is_reminder_suppressed(settings, now):
            continue
        result.processed_user_count += 1

        try:
            tasks = task_repo.get_active(settings.user_id)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching tasks for user {settings.user_id}: {type(e).__name__}: {str(e)}")
            result.error_count += 1
            continue

        for task in tasks:
            decision = evaluate_task(task, now, settings, remind_delegated=remind_delegated)
            if not decision.should_fire:
                continue
            try:
                outcome = deliver_reminder(task_repo, transport, settings.telegram_chat_id, task, decision, now)
            except SQLAlchemyError as e:
                logger.error(f"Failed to claim reminder for task {task.id}: {type(e).__name__}: {str(e)}")
                result.error_count += 1
                continue
            if outcome == DeliveryOutcome.SENT:
                result.sent_count += 1
            elif outcome == DeliveryOutcome.FAILED:
                result.error_count += 1

    logger.info(
        f"Reminder sweep: {result.processed_user_count} users, "
        f"{result.sent_count} sent, {result.error_count} errors"
    )
    return result


def summarize_tasks(tasks: List[Task], now: datetime) -> Tuple[int, int, int]:
    """Return (pending, overdue, completed_today) counts."""
    today_start = datetime.combine(now.date(), datetime.min.time())
    pending = [task for task in tasks if not task.is_done()]
    overdue = [task for task in pending if task.is_overdue(now)]
    completed_today = [
        task for task in tasks
        if task.is_done() and task.completed_at is not None and task.completed_at >= today_start
    ]
    return len(pending), len(overdue), len(completed_today)


def run_daily_summary(
    task_repo: TaskRepository,
    settings_repo: UserSettingsRepository,
    transport: MessageTransport,
    now: Optional[datetime] = None,
) -> SweepResult:
    """Send each reachable user a digest of pending/overdue/completed-today counts.

    Focus mode does not suppress the digest; vacation does. Users with nothing
    pending and nothing completed today get no message.
    """
    now = now or datetime.now()
    result = SweepResult(timestamp=now)

    for settings in settings_repo.list_with_delivery_target():
        if is_summary_suppressed(settings, now):
            continue
        result.processed_user_count += 1

        try:
            tasks = task_repo.get_all(settings.user_id)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching tasks for user {settings.user_id}: {type(e).__name__}: {str(e)}")
            result.error_count += 1
            continue

        pending, overdue, completed_today = summarize_tasks(tasks, now)
        if pending == 0 and completed_today == 0:
            continue

        if transport.send(settings.telegram_chat_id, format_daily_summary(pending, overdue, completed_today)):
            result.sent_count += 1
        else:
            result.error_count += 1

    logger.info(
        f"Daily summary: {result.processed_user_count} users, "
        f"{result.sent_count} sent, {result.error_count} errors"
    )
    return result
