"""Calendar-date boundary utilities.

Dates enter the system as ISO-8601 strings and are normalized here exactly
once. Everything past this module works on ``datetime.date`` values.
"""

import re
from datetime import date, datetime, timedelta
from typing import Iterator, Union

ISO_DATE_LENGTH = 10
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DATETIME_SEPARATORS = ("T", " ")


class InvalidDateError(ValueError):
    """Value is not an ISO-8601 calendar date."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f"Invalid date '{value}'. Expected YYYY-MM-DD")


class DateOutOfRangeError(InvalidDateError):
    """Date arithmetic left the calendar ``datetime.date`` can represent."""

    def __init__(self, start: date, days: int):
        self.value = start
        self.days = days
        ValueError.__init__(self, f"{start} plus {days} days is outside the supported calendar")


def parse_iso_date(value: Union[str, date, datetime]) -> date:
    """Parse a boundary value into a calendar date.

    Accepts ``YYYY-MM-DD`` or a full ISO-8601 datetime. For datetimes only the
    date part as written is kept: ``2024-03-01T23:30:00-05:00`` is 2024-03-01,
    never shifted into another timezone.

    Compact (``20240301``) and ISO week (``2024-W10-5``) forms are rejected on
    every Python version, even where ``fromisoformat`` would take them.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(value)

    text = value.strip()
    if not ISO_DATE_PATTERN.match(text[:ISO_DATE_LENGTH]):
        raise InvalidDateError(value)
    if len(text) > ISO_DATE_LENGTH and text[ISO_DATE_LENGTH] not in DATETIME_SEPARATORS:
        raise InvalidDateError(value)
    try:
        if len(text) > ISO_DATE_LENGTH:
            # fromisoformat() only learned the Z suffix in 3.11
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    except ValueError:
        raise InvalidDateError(value) from None


def format_iso_date(value: date) -> str:
    return value.isoformat()


def days_between(start: date, end: date) -> int:
    """Number of nights from ``start`` up to (not including) ``end``."""
    return (end - start).days


def inclusive_to_exclusive(last_night: date) -> date:
    """Convert a "last occupied night" to a checkout date."""
    return add_days(last_night, 1)


def exclusive_to_inclusive(end_date: date) -> date:
    """Convert a checkout date to the last occupied night, for display."""
    return end_date - timedelta(days=1)


def add_days(start: date, days: int) -> date:
    try:
        return start + timedelta(days=days)
    except OverflowError:
        raise DateOutOfRangeError(start, days) from None


def iter_nights(start: date, end: date) -> Iterator[date]:
    """Yield every night in ``[start, end)``."""
    current = start
    while current < end:
        yield current
        current += timedelta(days=1)
