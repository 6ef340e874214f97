"""Natural-language deadline resolution.

Runs one date extractor per locale (English and Portuguese by default) over
tag-stripped text, picks one candidate and grades how certain the result is.

This is a heuristic, not a guarantee of correctness for every phrasing:
- Every locale is asked independently; when several match, an injectable
  comparator picks the winner. The default keeps the longer matched text
  (ties go to the earlier locale), on the theory that a longer match carries
  more date information.
- Confidence comes from the matched text itself: an explicit day and an
  explicit month give `high`, any other match gives `medium`, no match gives
  `low`.
- dateparser reports "at 3pm next Monday" as two hits. A time-only hit and a
  date-only hit separated by nothing but a connector word are merged into one
  candidate (date from one, clock time from the other).
- A calendar date named without a clock time ("Friday", "Jan 20") comes back
  from dateparser at midnight; it is moved to noon of that day. Relative
  phrases ("tomorrow", "in 3 days") keep the reference time of day.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, time
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import dateparser.search

logger = logging.getLogger(__name__)


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class DeadlineCandidate:
    """One locale's reading of the text."""
    locale: str
    matched_text: str
    value: datetime
    explicit_day: bool
    explicit_month: bool


@dataclass(frozen=True)
class DeadlineResolution:
    deadline: datetime
    confidence: Confidence
    matched_text: Optional[str] = None
    is_past: bool = False  # before the reference time on an earlier calendar day
    locale: Optional[str] = None


Extractor = Callable[[str, datetime], Optional[DeadlineCandidate]]
CandidateComparator = Callable[[DeadlineCandidate, DeadlineCandidate], DeadlineCandidate]


_MONTH_WORDS = [
    # English
    "january", "february", "march", "april", "may", "june", "july", "august",
    "september", "october", "november", "december",
    "jan", "feb", "mar", "apr", "jun", "jul", "aug", "sep", "sept", "oct", "nov", "dec",
    # Portuguese
    "janeiro", "fevereiro", "março", "marco", "abril", "maio", "junho", "julho",
    "agosto", "setembro", "outubro", "novembro", "dezembro",
    "fev", "abr", "mai", "ago", "set", "out", "dez",
]

_MONTH_RE = re.compile(r"\b(" + "|".join(sorted(_MONTH_WORDS, key=len, reverse=True)) + r")\b\.?", re.I)
_NUMERIC_DATE_RE = re.compile(r"\b\d{1,4}[/.-]\d{1,2}(?:[/.-]\d{2,4})?\b")
# A 1-2 digit number that is not a clock time ("3pm", "14:00", "15h").
_DAY_NUMBER_RE = re.compile(
    r"(?<![:\d])\b(\d{1,2})(?:st|nd|rd|th|º|ª)?\b(?!\s*(?::\d|am\b|pm\b|h\b))",
    re.I,
)
_CLOCK_RE = re.compile(
    r"\d{1,2}:\d{2}"
    r"|\b\d{1,2}\s*(?:am|pm|a\.m\.|p\.m\.|h)(?![a-z])"
    r"|\b(?:noon|midnight|meio-dia|meia-noite)\b",
    re.I,
)
# Words allowed between two hits that belong to the same phrase.
_CONNECTORS = {"", ",", "at", "on", "by", "às", "as", "em", "no", "na", "de"}

IMPLIED_HOUR = time(12, 0)


def has_clock_time(matched_text: str) -> bool:
    return bool(_CLOCK_RE.search(matched_text))


def _locate_hits(text: str, results: Sequence[Tuple[str, datetime]]) -> List[Tuple[int, int, datetime]]:
    """(start, end, value) of each hit, in order of appearance."""
    hits = []
    cursor = 0
    for matched_text, value in results:
        start = text.find(matched_text, cursor)
        if start < 0:
            break
        hits.append((start, start + len(matched_text), value))
        cursor = start + len(matched_text)
    return hits


def merge_adjacent_hits(text: str, results: Sequence[Tuple[str, datetime]]) -> Tuple[str, datetime]:
    """Join the first hit with its neighbor when one holds the date and the other the time.

    Returns the (matched_text, value) to use; the matched text spans both hits.
    """
    first_text, first_value = results[0]
    hits = _locate_hits(text, results)
    if len(hits) < 2:
        return first_text, first_value

    (start, end, value), (next_start, next_end, next_value) = hits[0], hits[1]
    if text[end:next_start].strip().lower() not in _CONNECTORS:
        return first_text, first_value

    next_text = text[next_start:next_end]
    first_has_clock, next_has_clock = has_clock_time(first_text), has_clock_time(next_text)
    if first_has_clock == next_has_clock:
        return first_text, first_value

    date_value, time_value = (next_value, value) if first_has_clock else (value, next_value)
    merged = datetime.combine(date_value.date(), time_value.time())
    return text[start:next_end], merged


def apply_implied_time(matched_text: str, value: datetime) -> datetime:
    """Move a date-only match from midnight to noon."""
    if value.time() == time(0, 0) and not has_clock_time(matched_text):
        return datetime.combine(value.date(), IMPLIED_HOUR)
    return value


def _explicit_components(matched_text: str) -> tuple[bool, bool]:
    """Return (explicit_day, explicit_month) for a matched date substring."""
    if _NUMERIC_DATE_RE.search(matched_text):
        return True, True
    explicit_month = bool(_MONTH_RE.search(matched_text))
    explicit_day = bool(_DAY_NUMBER_RE.search(matched_text))
    return explicit_day, explicit_month


def _to_naive_local(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def dateparser_extractor(language: str) -> Extractor:
    """Build an extractor backed by `dateparser.search.search_dates` for one language."""

    def extract(text: str, reference_time: datetime) -> Optional[DeadlineCandidate]:
        settings = {
            "PREFER_DATES_FROM": "future",
            "RELATIVE_BASE": reference_time,
        }
        try:
            results = dateparser.search.search_dates(text, languages=[language], settings=settings)
        except Exception:
            logger.exception(f"dateparser failed for language {language}")
            return None
        if not results:
            return None
        results = [(matched_text, _to_naive_local(value)) for matched_text, value in results]
        matched_text, value = merge_adjacent_hits(text, results)
        explicit_day, explicit_month = _explicit_components(matched_text)
        return DeadlineCandidate(
            locale=language,
            matched_text=matched_text,
            value=apply_implied_time(matched_text, value),
            explicit_day=explicit_day,
            explicit_month=explicit_month,
        )

    return extract


DEFAULT_EXTRACTORS: List[Extractor] = [dateparser_extractor("en"), dateparser_extractor("pt")]


def longer_match_wins(current: DeadlineCandidate, challenger: DeadlineCandidate) -> DeadlineCandidate:
    """Keep the candidate with the longer matched text; ties keep `current`."""
    if len(challenger.matched_text) > len(current.matched_text):
        return challenger
    return current


def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999000)


def confidence_for(candidate: Optional[DeadlineCandidate]) -> Confidence:
    if candidate is None:
        return Confidence.LOW
    if candidate.explicit_day and candidate.explicit_month:
        return Confidence.HIGH
    return Confidence.MEDIUM


def select_candidate(
    candidates: Sequence[Optional[DeadlineCandidate]],
    comparator: CandidateComparator = longer_match_wins,
) -> Optional[DeadlineCandidate]:
    """Fold candidates (in locale order) through the comparator."""
    chosen: Optional[DeadlineCandidate] = None
    for candidate in candidates:
        if candidate is None:
            continue
        chosen = candidate if chosen is None else comparator(chosen, candidate)
    return chosen


def resolve_deadline(
    text: str,
    reference_time: Optional[datetime] = None,
    *,
    extractors: Optional[Sequence[Extractor]] = None,
    comparator: CandidateComparator = longer_match_wins,
) -> DeadlineResolution:
    """Resolve a deadline from free text. Never raises.

    With no match the deadline is the end of the reference day and confidence
    is low. A match earlier than the reference time on the same calendar day
    snaps to the end of that day; an earlier calendar day is kept and flagged
    with `is_past`.
    """
    reference_time = reference_time or datetime.now()
    extractors = DEFAULT_EXTRACTORS if extractors is None else extractors

    candidates = [extract(text or "", reference_time) for extract in extractors]
    chosen = select_candidate(candidates, comparator)

    if chosen is None:
        return DeadlineResolution(deadline=end_of_day(reference_time), confidence=Confidence.LOW)

    deadline = chosen.value
    is_past = False
    if deadline < reference_time:
        if deadline.date() == reference_time.date():
            deadline = end_of_day(deadline)
        else:
            is_past = True

    return DeadlineResolution(
        deadline=deadline,
        confidence=confidence_for(chosen),
        matched_text=chosen.matched_text,
        is_past=is_past,
        locale=chosen.locale,
    )
