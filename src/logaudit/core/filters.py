"""Line selection by leading date token and optional level pattern."""

from __future__ import annotations

import re

from logaudit.core.dates import DateRange
from logaudit.core.exceptions import ConfigError

# First field must *start* with a date; "2023-01-02T10:00:00" qualifies and
# only its date part is compared, never the time of day.
_LEADING_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def leading_date_token(line: str) -> str | None:
    """Return the ``YYYY-MM-DD`` prefix of the first field, or None."""
    fields = line.split(None, 1)
    if not fields:
        return None
    match = _LEADING_DATE.match(fields[0])
    return match.group(0) if match else None


class LineFilter:
    """
    Decide whether a log line belongs in the aggregate.

    ``level`` is searched as a regular expression anywhere in the line, so a
    plain word such as ``ERROR`` acts as a literal substring. An empty or
    missing level disables level filtering.
    """

    def __init__(self, date_range: DateRange, level: str | None = None) -> None:
        self.date_range = date_range
        self.level = level or None
        self._level_re: re.Pattern[str] | None = None
        if self.level:
            try:
                self._level_re = re.compile(self.level)
            except re.error as exc:
                raise ConfigError(f"Invalid log level pattern {self.level!r}: {exc}") from exc

    def include(self, line: str) -> bool:
        token = leading_date_token(line)
        if token is None or not self.date_range.contains(token):
            return False
        if self._level_re is not None and not self._level_re.search(line):
            return False
        return True

    __call__ = include
