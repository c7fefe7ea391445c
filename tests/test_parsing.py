"""Tests for visit-date and ticket-count parsing."""

from datetime import date

import pytest

from src.conversation.parsing import extract_ticket_count, is_valid_future_date, parse_date
from tests.conftest import TODAY


class TestParseDateNumeric:
    def test_iso_date(self):
        assert parse_date("2099-01-01") == date(2099, 1, 1)

    def test_iso_prefix_ignores_trailing_text(self):
        assert parse_date("2030-07-01 please") == date(2030, 7, 1)

    def test_day_first_with_dashes(self):
        assert parse_date("25-12-2030") == date(2030, 12, 25)

    def test_day_first_with_slashes(self):
        assert parse_date("31/12/2030") == date(2030, 12, 31)

    def test_ambiguous_date_reads_day_first(self):
        assert parse_date("03/04/2030") == date(2030, 4, 3)

    def test_month_first_when_day_first_is_impossible(self):
        assert parse_date("12/25/2030") == date(2030, 12, 25)


class TestParseDateRelative:
    def test_today(self):
        assert parse_date("today", today=TODAY) == TODAY

    def test_tomorrow(self):
        assert parse_date("Tomorrow please", today=TODAY) == date(2030, 6, 15)

    def test_day_after_tomorrow_is_two_days(self):
        assert parse_date("day after tomorrow", today=TODAY) == date(2030, 6, 16)


class TestParseDateCalendar:
    def test_written_out_date(self):
        assert parse_date("December 25, 2030") == date(2030, 12, 25)

    @pytest.mark.parametrize("text", ["", "   ", "whenever"])
    def test_unparseable_is_none(self, text):
        assert parse_date(text, today=TODAY) is None


class TestFutureDate:
    def test_today_is_accepted(self):
        assert is_valid_future_date(TODAY, today=TODAY)

    def test_far_future_accepted(self):
        assert is_valid_future_date(date(2099, 1, 1), today=TODAY)

    def test_past_rejected(self):
        assert not is_valid_future_date(date(2000, 1, 1), today=TODAY)

    def test_none_rejected(self):
        assert not is_valid_future_date(None, today=TODAY)


class TestTicketCount:
    @pytest.mark.parametrize("text,expected", [
        ("3", 3),
        ("I need 2 tickets", 2),
        ("100", 100),
        ("two", 2),
        ("fourteen please", 14),
        ("a couple", 2),
        ("just a single one", 1),
        ("a few", 3),
    ])
    def test_valid_counts(self, text, expected):
        assert extract_ticket_count(text) == expected

    @pytest.mark.parametrize("text", ["0", "101", "many", "none", ""])
    def test_invalid_counts(self, text):
        assert extract_ticket_count(text) is None

    def test_custom_maximum(self):
        assert extract_ticket_count("12", max_count=10) is None
        assert extract_ticket_count("10", max_count=10) == 10
