"""
Calendar dates and the inclusive audit period.

Dates are plain ``datetime.date`` values parsed from the zero-padded ISO form
``YYYY-MM-DD``. Log lines carry the same fixed-width form, which makes a
string comparison of the leading token equivalent to a chronological one.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from logaudit.core.exceptions import DateRangeError, InvalidDateError

_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def parse_date(value: str | date) -> date:
    """Parse ``YYYY-MM-DD`` into a date, raising InvalidDateError otherwise."""
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not _ISO_DATE.fullmatch(text):
        raise InvalidDateError(f"Invalid date format: {value!r}. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(text)
    except ValueError as exc:
        raise InvalidDateError(f"Invalid date: {value!r} ({exc})") from exc


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] period at day granularity."""

    start: date
    end: date

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise DateRangeError(
                f"Start date cannot be after end date: {self.start} > {self.end}"
            )

    @classmethod
    def from_strings(cls, start: str | date, end: str | date) -> DateRange:
        return cls(parse_date(start), parse_date(end))

    @property
    def start_token(self) -> str:
        return self.start.isoformat()

    @property
    def end_token(self) -> str:
        return self.end.isoformat()

    def contains(self, token: str) -> bool:
        """True when a ``YYYY-MM-DD`` token lies inside the period."""
        # Day granularity: "2023-01-04T23:59:59Z" is inside a period ending 2023-01-04.
        return self.start_token <= token[:10] <= self.end_token

    def __str__(self) -> str:
        return f"{self.start_token} to {self.end_token}"
