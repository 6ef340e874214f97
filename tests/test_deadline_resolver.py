"""Tests for deadline resolution.

Locale selection and past-date handling use fake extractors; a few cases run
through dateparser end to end.
"""

from datetime import datetime, timedelta

import pytest

from accountabot.parsing.deadline import (
    Confidence,
    DeadlineCandidate,
    apply_implied_time,
    confidence_for,
    dateparser_extractor,
    end_of_day,
    has_clock_time,
    longer_match_wins,
    merge_adjacent_hits,
    resolve_deadline,
    select_candidate,
)


REFERENCE = datetime(2024, 1, 15, 10, 0, 0)


def fixed_extractor(locale, matched_text, value, explicit_day=False, explicit_month=False):
    def extract(text, reference_time):
        if matched_text not in text:
            return None
        return DeadlineCandidate(locale, matched_text, value, explicit_day, explicit_month)
    return extract


def never(text, reference_time):
    return None


class TestCandidateSelection:
    """Test choosing between locales."""

    def test_longer_match_wins(self):
        short = DeadlineCandidate("en", "Jan 20", datetime(2024, 1, 20), True, True)
        long = DeadlineCandidate("pt", "20 de janeiro", datetime(2024, 1, 20), True, True)
        assert longer_match_wins(short, long) is long
        assert longer_match_wins(long, short) is long

    def test_tie_keeps_first_locale(self):
        en = DeadlineCandidate("en", "amanha", datetime(2024, 1, 16), False, False)
        pt = DeadlineCandidate("pt", "amanhã", datetime(2024, 1, 16), False, False)
        assert select_candidate([en, pt]) is en

    def test_missing_candidates_skipped(self):
        pt = DeadlineCandidate("pt", "amanhã", datetime(2024, 1, 16), False, False)
        assert select_candidate([None, pt]) is pt
        assert select_candidate([None, None]) is None

    def test_comparator_is_injectable(self):
        en = DeadlineCandidate("en", "tomorrow at noon", datetime(2024, 1, 16, 12), False, False)
        pt = DeadlineCandidate("pt", "amanhã", datetime(2024, 1, 16), False, False)
        prefer_last = lambda current, challenger: challenger  # noqa: E731
        assert select_candidate([en, pt], prefer_last) is pt

    def test_resolver_uses_longer_locale_match(self):
        extractors = [
            fixed_extractor("en", "20", datetime(2024, 2, 20), explicit_day=True),
            fixed_extractor("pt", "20 de janeiro", datetime(2024, 1, 20), True, True),
        ]
        result = resolve_deadline("Entregar 20 de janeiro", REFERENCE, extractors=extractors)
        assert result.deadline == datetime(2024, 1, 20)
        assert result.locale == "pt"
        assert result.matched_text == "20 de janeiro"


class TestConfidence:
    """Test confidence grading."""

    @pytest.mark.parametrize(
        "explicit_day,explicit_month,expected",
        [
            (True, True, Confidence.HIGH),
            (True, False, Confidence.MEDIUM),
            (False, True, Confidence.MEDIUM),
            (False, False, Confidence.MEDIUM),
        ],
    )
    def test_matched_candidate(self, explicit_day, explicit_month, expected):
        candidate = DeadlineCandidate("en", "x", REFERENCE, explicit_day, explicit_month)
        assert confidence_for(candidate) == expected

    def test_no_candidate_is_low(self):
        assert confidence_for(None) == Confidence.LOW


class TestResolveDeadline:
    """Test default and past-date behavior."""

    def test_no_match_defaults_to_end_of_reference_day(self):
        result = resolve_deadline("Clean the garage", REFERENCE, extractors=[never, never])

        assert result.deadline == datetime(2024, 1, 15, 23, 59, 59, 999000)
        assert result.confidence == Confidence.LOW
        assert result.matched_text is None
        assert result.is_past is False

    def test_earlier_today_snaps_to_end_of_day(self):
        extractors = [fixed_extractor("en", "at 9am", datetime(2024, 1, 15, 9, 0))]
        result = resolve_deadline("Call mom at 9am", REFERENCE, extractors=extractors)

        assert result.deadline == end_of_day(REFERENCE)
        assert result.is_past is False

    def test_earlier_day_is_flagged_past(self):
        extractors = [fixed_extractor("en", "2024-01-10", datetime(2024, 1, 10), True, True)]
        result = resolve_deadline("Pay rent 2024-01-10", REFERENCE, extractors=extractors)

        assert result.deadline == datetime(2024, 1, 10)
        assert result.is_past is True
        assert result.confidence == Confidence.HIGH

    def test_extractor_sees_reference_time(self):
        seen = []

        def recording(text, reference_time):
            seen.append(reference_time)
            return None

        resolve_deadline("anything", REFERENCE, extractors=[recording])
        assert seen == [REFERENCE]


class TestDateparserExtraction:
    """End-to-end cases through dateparser."""

    def test_tomorrow(self):
        result = resolve_deadline("Buy groceries tomorrow", REFERENCE)

        assert result.deadline.date() == datetime(2024, 1, 16).date()
        assert result.confidence == Confidence.MEDIUM
        assert result.matched_text == "tomorrow"

    def test_month_and_day_is_high_confidence(self):
        result = resolve_deadline("Submit report January 20", REFERENCE)

        assert result.deadline.date() == datetime(2024, 1, 20).date()
        assert result.confidence == Confidence.HIGH

    def test_no_date(self):
        result = resolve_deadline("Clean the garage", REFERENCE)

        assert result.deadline == end_of_day(REFERENCE)
        assert result.confidence == Confidence.LOW


class TestImpliedTime:
    """Test the noon default for dates named without a clock time."""

    @pytest.mark.parametrize("text", ["3pm", "at 15:00", "9 am", "15h", "at noon", "meia-noite"])
    def test_clock_time_detected(self, text):
        assert has_clock_time(text)

    @pytest.mark.parametrize("text", ["Friday", "Jan 20", "next Monday", "20th", "sexta-feira"])
    def test_no_clock_time(self, text):
        assert not has_clock_time(text)

    def test_midnight_date_moves_to_noon(self):
        assert apply_implied_time("Friday", datetime(2024, 1, 19)) == datetime(2024, 1, 19, 12, 0)

    def test_explicit_midnight_is_kept(self):
        assert apply_implied_time("Friday at midnight", datetime(2024, 1, 19)) == datetime(2024, 1, 19)

    def test_relative_phrase_keeps_reference_time(self):
        value = datetime(2024, 1, 16, 10, 0)
        assert apply_implied_time("tomorrow", value) == value


class TestMergeAdjacentHits:
    """Test joining a time-only hit with its date-only neighbor."""

    def test_time_then_date(self):
        results = [("at 3pm", datetime(2024, 1, 15, 15, 0)), ("next Monday", datetime(2024, 1, 22, 10, 0))]

        matched, value = merge_adjacent_hits("Meeting at 3pm next Monday", results)

        assert matched == "at 3pm next Monday"
        assert value == datetime(2024, 1, 22, 15, 0)

    def test_date_then_time_across_connector(self):
        results = [("Friday", datetime(2024, 1, 19)), ("5pm", datetime(2024, 1, 15, 17, 0))]

        matched, value = merge_adjacent_hits("Call mom Friday at 5pm", results)

        assert matched == "Friday at 5pm"
        assert value == datetime(2024, 1, 19, 17, 0)

    def test_two_dates_are_not_merged(self):
        results = [("Friday", datetime(2024, 1, 19)), ("Monday", datetime(2024, 1, 22))]

        assert merge_adjacent_hits("Friday or Monday", results) == ("Friday", datetime(2024, 1, 19))

    def test_unrelated_words_between_hits(self):
        results = [("3pm", datetime(2024, 1, 15, 15, 0)), ("Monday", datetime(2024, 1, 22))]

        matched, value = merge_adjacent_hits("3pm call, then prepare for Monday", results)

        assert matched == "3pm"
        assert value == datetime(2024, 1, 15, 15, 0)

    def test_single_hit(self):
        results = [("tomorrow", datetime(2024, 1, 16, 10, 0))]
        assert merge_adjacent_hits("Buy milk tomorrow", results) == ("tomorrow", datetime(2024, 1, 16, 10, 0))


class TestWeekdayNamesResolveForward:
    """A bare weekday name never lands before the reference day."""

    @pytest.mark.parametrize("language,text", [
        ("en", "Pay rent Monday"),
        ("en", "Pay rent Tuesday"),
        ("en", "Pay rent Wednesday"),
        ("en", "Pay rent Thursday"),
        ("en", "Pay rent Friday"),
        ("en", "Pay rent Saturday"),
        ("en", "Pay rent Sunday"),
        ("pt", "Pagar aluguel segunda-feira"),
        ("pt", "Pagar aluguel terça-feira"),
        ("pt", "Pagar aluguel quarta-feira"),
        ("pt", "Pagar aluguel quinta-feira"),
        ("pt", "Pagar aluguel sexta-feira"),
        ("pt", "Pagar aluguel sábado"),
        ("pt", "Pagar aluguel domingo"),
    ])
    def test_weekday(self, language, text):
        result = resolve_deadline(text, REFERENCE, extractors=[dateparser_extractor(language)])

        assert result.matched_text is not None
        assert result.deadline.date() >= REFERENCE.date()
        assert result.deadline - REFERENCE < timedelta(days=8)
        assert result.is_past is False
