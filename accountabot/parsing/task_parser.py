"""Parse a free-text chat message into a proposed task.

Combines hashtag extraction and deadline resolution. Input problems are
returned as structured failures; nothing here raises for string input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from accountabot.models.constants import MIN_MESSAGE_LENGTH, MIN_TITLE_LENGTH
from accountabot.models.task import TaskTag
from accountabot.parsing.deadline import Confidence, resolve_deadline
from accountabot.parsing.tags import extract_tags


class ParseErrorCode(str, Enum):
    TOO_SHORT = "TooShort"
    TITLE_MISSING = "TitleMissing"


ERROR_MESSAGES = {
    ParseErrorCode.TOO_SHORT: "Message too short. Please describe your task.",
    ParseErrorCode.TITLE_MISSING: "Please provide a task title (not just tags).",
}

PAST_DEADLINE_WARNING = "Deadline is in the past"

_PREPOSITIONS = r"(by|on|at|for|until|before|due|para|ate|até|em|no|na|às|as)"
_TRAILING_PREPOSITION_RE = re.compile(r"\b" + _PREPOSITIONS + r"\s*$", re.I)
_LEADING_PREPOSITION_RE = re.compile(r"^\s*" + _PREPOSITIONS + r"\b", re.I)
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class ParsedTaskIntent:
    title: str
    deadline: datetime
    tags: List[TaskTag] = field(default_factory=list)
    confidence: Confidence = Confidence.LOW
    warning: Optional[str] = None
    raw_deadline_text: Optional[str] = None


@dataclass(frozen=True)
class ParseResult:
    success: bool
    task: Optional[ParsedTaskIntent] = None
    error: Optional[ParseErrorCode] = None
    warning: Optional[str] = None

    @property
    def message(self) -> Optional[str]:
        """Human-readable error text for failed parses."""
        return ERROR_MESSAGES.get(self.error) if self.error else None

    @classmethod
    def failure(cls, error: ParseErrorCode) -> "ParseResult":
        return cls(success=False, error=error)


def _strip_date_text(text: str, matched_text: str) -> str:
    """Remove the matched date phrase and the prepositions left around it."""
    title = text.replace(matched_text, "", 1).strip()
    title = _TRAILING_PREPOSITION_RE.sub("", title)
    title = _LEADING_PREPOSITION_RE.sub("", title)
    return _WHITESPACE_RE.sub(" ", title).strip()


def _compose_warning(is_past: bool, unknown_tags: List[str]) -> Optional[str]:
    parts: List[str] = []
    if is_past:
        parts.append(PAST_DEADLINE_WARNING)
    if unknown_tags:
        label = "Unknown tags" if len(unknown_tags) > 1 else "Unknown tag"
        parts.append(f"{label}: " + ", ".join(f"#{tag}" for tag in unknown_tags))
    return ". ".join(parts) if parts else None


def parse_task_message(text: Optional[str], reference_time: Optional[datetime] = None) -> ParseResult:
    """Parse a chat message into a task intent.

    Examples:
    - "Buy groceries tomorrow #work" -> "Buy groceries", tomorrow, management tag
    - "Submit report by Jan 20" -> "Submit report", Jan 20, high confidence
    - "Clean the garage" -> end of today, low confidence
    """
    reference_time = reference_time or datetime.now()
    trimmed = (text or "").strip()
    if len(trimmed) < MIN_MESSAGE_LENGTH:
        return ParseResult.failure(ParseErrorCode.TOO_SHORT)

    extraction = extract_tags(trimmed)
    clean_text = extraction.clean_text
    if len(clean_text) < MIN_TITLE_LENGTH:
        return ParseResult.failure(ParseErrorCode.TITLE_MISSING)

    resolution = resolve_deadline(clean_text, reference_time)

    if resolution.matched_text:
        title = _strip_date_text(clean_text, resolution.matched_text) or clean_text
        confidence = resolution.confidence
    else:
        # No match means low confidence regardless of what the resolver reported.
        title = clean_text
        confidence = Confidence.LOW

    warning = _compose_warning(resolution.is_past, extraction.unknown_tags)
    intent = ParsedTaskIntent(
        title=title,
        deadline=resolution.deadline,
        tags=extraction.tags,
        confidence=confidence,
        warning=warning,
        raw_deadline_text=resolution.matched_text,
    )
    return ParseResult(success=True, task=intent, warning=warning)
