"""Test currency and calendar-date helpers."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from app.utils.currency import format_currency, parse_currency_input, round_half_up
from app.utils.dates import (
    days_elapsed,
    days_in_month,
    get_month_key,
    month_bounds,
    month_progress,
    parse_date_from_text,
    parse_month_key,
    remaining_days_in_month,
    to_local_date,
    weekday_index,
)


class TestCurrency:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("$1,234.50", 1234.5),
            ("45", 45.0),
            ("12.50 bucks", 12.5),
            ("-$20", -20.0),
            ("", 0.0),
            (None, 0.0),
            ("abc", 0.0),
            ("inf", 0.0),
        ],
    )
    def test_parse_currency_input(self, text, expected):
        assert parse_currency_input(text) == expected

    def test_format_currency(self):
        assert format_currency(1234.5) == "$1,234.50"
        assert format_currency(-1234.5) == "-$1,234.50"
        assert format_currency(0) == "$0.00"

    def test_round_half_up(self):
        assert round_half_up(12.5) == 13
        assert round_half_up(-12.5) == -12
        assert round_half_up(44.4) == 44


class TestMonths:
    def test_month_key_round_trip(self):
        assert get_month_key(date(2024, 3, 9)) == "2024-03"
        assert parse_month_key("2024-03") == (2024, 3)

    @pytest.mark.parametrize("bad", ["2024-13", "2024-3", "March", "", "2024-00"])
    def test_invalid_month_key(self, bad):
        with pytest.raises(ValueError, match="Invalid month format"):
            parse_month_key(bad)

    def test_month_lengths(self):
        assert days_in_month(2024, 2) == 29
        assert days_in_month(2023, 2) == 28
        assert month_bounds("2024-04") == (date(2024, 4, 1), date(2024, 4, 30))

    def test_remaining_days_and_progress(self):
        assert remaining_days_in_month(date(2024, 10, 31)) == 1
        assert remaining_days_in_month(date(2024, 10, 1)) == 31
        assert month_progress(date(2024, 9, 15)) == 50

    def test_days_elapsed(self):
        today = date(2024, 10, 15)
        assert days_elapsed("2024-10", today) == 15
        assert days_elapsed("2024-09", today) == 30
        assert days_elapsed("2024-11", today) == 0


class TestLocalDates:
    def test_plain_date_string(self):
        assert to_local_date("2024-10-15") == date(2024, 10, 15)

    def test_evening_purchase_stays_on_local_day(self):
        # 9pm in New York is already the next day in UTC
        stored = datetime(2024, 10, 16, 1, 0, tzinfo=timezone.utc)
        assert to_local_date(stored, ZoneInfo("America/New_York")) == date(2024, 10, 15)

    def test_iso_timestamp_string(self):
        assert to_local_date("2024-10-16T01:00:00Z", ZoneInfo("America/New_York")) == date(2024, 10, 15)

    def test_weekday_index_starts_on_sunday(self):
        assert weekday_index(date(2024, 10, 13)) == 0
        assert weekday_index(date(2024, 10, 19)) == 6


class TestParseDateFromText:
    # Tuesday
    TODAY = date(2024, 10, 15)

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("coffee today", "2024-10-15"),
            ("spent $45 at Costco yesterday", "2024-10-14"),
            ("dentist tomorrow", "2024-10-16"),
            ("dinner last friday", "2024-10-11"),
            ("lunch last tuesday", "2024-10-08"),
            ("gym next monday", "2024-10-21"),
            ("concert next tuesday", "2024-10-22"),
            ("rent on 2024-11-01", "2024-11-01"),
            ("books 9/3", "2024-09-03"),
            ("flight 12/24/25", "2025-12-24"),
            ("groceries aug 3rd", "2024-08-03"),
            ("gift on August 3, 2023", "2023-08-03"),
        ],
    )
    def test_recognized_phrases(self, text, expected):
        assert parse_date_from_text(text, self.TODAY) == expected

    def test_no_date(self):
        assert parse_date_from_text("coffee with sam", self.TODAY) is None

    def test_impossible_date_is_ignored(self):
        assert parse_date_from_text("paid 2/30", self.TODAY) is None
