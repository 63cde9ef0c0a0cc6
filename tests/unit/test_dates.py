"""Unit tests for logaudit.core.dates: date parsing and the inclusive period."""

from __future__ import annotations

from datetime import date

import pytest

from logaudit.core.dates import DateRange, parse_date
from logaudit.core.exceptions import ConfigError, DateRangeError, InvalidDateError


class TestParseDate:
    def test_valid_iso_date(self) -> None:
        assert parse_date("2023-01-02") == date(2023, 1, 2)

    def test_surrounding_whitespace_ignored(self) -> None:
        assert parse_date(" 2023-01-02\n") == date(2023, 1, 2)

    def test_date_instance_passthrough(self) -> None:
        d = date(2024, 2, 29)
        assert parse_date(d) is d

    @pytest.mark.parametrize(
        "value",
        ["2023-1-2", "2023/01/02", "02-01-2023", "20230102", "", "yesterday", "2023-01-02x"],
    )
    def test_malformed_rejected(self, value: str) -> None:
        with pytest.raises(InvalidDateError):
            parse_date(value)

    @pytest.mark.parametrize("value", ["2023-02-30", "2023-13-01", "2023-00-10", "2023-02-29"])
    def test_impossible_calendar_date_rejected(self, value: str) -> None:
        with pytest.raises(InvalidDateError):
            parse_date(value)

    def test_invalid_date_is_config_error(self) -> None:
        with pytest.raises(ConfigError):
            parse_date("not-a-date")


class TestDateRange:
    def test_start_after_end_rejected(self) -> None:
        with pytest.raises(DateRangeError):
            DateRange(date(2023, 1, 5), date(2023, 1, 4))

    def test_single_day_range_allowed(self) -> None:
        r = DateRange.from_strings("2023-01-04", "2023-01-04")
        assert r.contains("2023-01-04")
        assert not r.contains("2023-01-03")
        assert not r.contains("2023-01-05")

    def test_bounds_inclusive(self) -> None:
        r = DateRange.from_strings("2023-01-02", "2023-01-04")
        assert r.contains("2023-01-02")
        assert r.contains("2023-01-03")
        assert r.contains("2023-01-04")
        assert not r.contains("2023-01-01")
        assert not r.contains("2023-01-05")

    def test_contains_compares_day_prefix_only(self) -> None:
        r = DateRange.from_strings("2023-01-02", "2023-01-04")
        assert r.contains("2023-01-04T23:59:59")

    def test_range_spanning_year_boundary(self) -> None:
        r = DateRange.from_strings("2022-12-30", "2023-01-02")
        assert r.contains("2022-12-31")
        assert r.contains("2023-01-01")
        assert not r.contains("2022-12-29")

    def test_str_matches_report_period(self) -> None:
        r = DateRange.from_strings("2023-01-02", "2023-01-04")
        assert str(r) == "2023-01-02 to 2023-01-04"
