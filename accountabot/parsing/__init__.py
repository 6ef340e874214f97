"""Free-text task parsing for accountabot."""

from accountabot.parsing.tags import extract_tags, TagExtraction
from accountabot.parsing.deadline import resolve_deadline, Confidence, DeadlineCandidate, DeadlineResolution
from accountabot.parsing.task_parser import parse_task_message, ParseResult, ParseErrorCode, ParsedTaskIntent

__all__ = [
    "extract_tags",
    "TagExtraction",
    "resolve_deadline",
    "Confidence",
    "DeadlineCandidate",
    "DeadlineResolution",
    "parse_task_message",
    "ParseResult",
    "ParseErrorCode",
    "ParsedTaskIntent",
]
