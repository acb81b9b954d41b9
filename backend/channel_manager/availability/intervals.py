"""Booking interval engine.

Every range here is half-open ``[start_date, end_date)``: the end date is the
checkout day and its night is free. A guest checking out on the 15th and a
guest checking in on the 15th do not overlap.

The functions are pure. They accept anything exposing ``start_date`` and
``end_date`` (ORM rows, schemas, the dataclasses below) and never read the
clock; horizons are always passed in.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Iterable, Optional, Protocol, Sequence, TypeVar
from uuid import UUID

from channel_manager.availability.dates import add_days, days_between
from channel_manager.availability.errors import (
    BookingError,
    ConflictError,
    InvalidRangeError,
)


class DateSpanLike(Protocol):
    start_date: date
    end_date: date


SpanT = TypeVar("SpanT", bound=DateSpanLike)


@dataclass(frozen=True)
class DateSpan:
    """A plain half-open date range."""

    start_date: date
    end_date: date

    @property
    def nights(self) -> int:
        return days_between(self.start_date, self.end_date)

    def is_valid(self) -> bool:
        return self.start_date < self.end_date


@dataclass(frozen=True)
class Horizon(DateSpan):
    """Query window for gap and occupancy questions."""

    def __post_init__(self):
        if self.start_date >= self.end_date:
            raise InvalidRangeError(self.start_date, self.end_date)

    @classmethod
    def from_start(cls, start: date, days: int) -> "Horizon":
        """Window of ``days`` nights; ``DateOutOfRangeError`` past the calendar end."""
        return cls(start, add_days(start, days))


@dataclass(frozen=True)
class Gap:
    """A maximal run of free nights inside a horizon."""

    start_date: date
    end_date: date
    nights: int


@dataclass(frozen=True)
class BookingInterval:
    """An active booking as seen by the engine."""

    id: UUID
    property_id: UUID
    start_date: date
    end_date: date
    source: str = "manual"
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: Any) -> "BookingInterval":
        return cls(
            id=record.id,
            property_id=record.property_id,
            start_date=record.start_date,
            end_date=record.end_date,
            source=record.source,
            created_at=getattr(record, "created_at", None),
        )

    @property
    def nights(self) -> int:
        return days_between(self.start_date, self.end_date)


def horizon_from(today: date, days: int) -> Horizon:
    """``[today, today + days)``."""
    return Horizon.from_start(today, days)


def overlaps(a: DateSpanLike, b: DateSpanLike) -> bool:
    """True iff the two half-open ranges share at least one night.

    Both ranges must already be valid (start before end).
    """
    return a.start_date < b.end_date and b.start_date < a.end_date


def chronological(intervals: Iterable[SpanT]) -> list[SpanT]:
    """Sort by start date, ties broken by end date."""
    return sorted(intervals, key=lambda i: (i.start_date, i.end_date))


def _within(intervals: Iterable[SpanT], horizon: DateSpanLike) -> list[SpanT]:
    # Inverted rows would otherwise punch phantom gaps into the sweep
    return [
        i for i in intervals
        if i.start_date < i.end_date and overlaps(i, horizon)
    ]


def find_gaps(intervals: Iterable[DateSpanLike], horizon: Horizon) -> list[Gap]:
    """Free sub-ranges of ``horizon``, in chronological order.

    Overlapping or duplicated input is tolerated: the sweep cursor only moves
    forward, so covered nights are never reported twice. Zero-night gaps are
    never emitted.
    """
    gaps: list[Gap] = []
    cursor = horizon.start_date

    for interval in chronological(_within(intervals, horizon)):
        if cursor >= horizon.end_date:
            break
        if interval.start_date > cursor:
            gaps.append(
                Gap(cursor, interval.start_date, days_between(cursor, interval.start_date))
            )
        cursor = max(cursor, interval.end_date)

    if cursor < horizon.end_date:
        gaps.append(Gap(cursor, horizon.end_date, days_between(cursor, horizon.end_date)))

    return gaps


def merge_intervals(intervals: Iterable[DateSpanLike]) -> list[DateSpan]:
    """Coalesce overlapping or touching ranges into disjoint spans."""
    merged: list[DateSpan] = []
    for interval in chronological(i for i in intervals if i.start_date < i.end_date):
        if merged and interval.start_date <= merged[-1].end_date:
            last = merged[-1]
            if interval.end_date > last.end_date:
                merged[-1] = DateSpan(last.start_date, interval.end_date)
        else:
            merged.append(DateSpan(interval.start_date, interval.end_date))
    return merged


def nights_occupied(intervals: Iterable[DateSpanLike], horizon: Horizon) -> int:
    """Distinct nights inside ``horizon`` covered by at least one interval.

    Always equals ``horizon.nights - sum(g.nights for g in find_gaps(...))``.
    """
    total = 0
    for span in merge_intervals(_within(intervals, horizon)):
        start = max(span.start_date, horizon.start_date)
        end = min(span.end_date, horizon.end_date)
        total += days_between(start, end)
    return total


def occupancy_rate(intervals: Iterable[DateSpanLike], horizon: Horizon) -> float:
    return round(nights_occupied(intervals, horizon) / horizon.nights, 4)


def count_active_in_horizon(intervals: Iterable[DateSpanLike], horizon: Horizon) -> int:
    """Number of bookings touching at least one night of the horizon."""
    return len(_within(intervals, horizon))


def find_conflicts(existing: Iterable[SpanT], candidate: DateSpanLike) -> list[SpanT]:
    """Every existing interval overlapping ``candidate``, chronologically."""
    return [e for e in chronological(existing) if overlaps(candidate, e)]


def can_create(
    existing: Sequence[Any],
    candidate: DateSpanLike,
) -> Optional[BookingError]:
    """Gate for new bookings. Returns None when the candidate may be stored.

    Returns ``InvalidRangeError`` for an empty or inverted candidate, else a
    ``ConflictError`` naming the earliest existing booking it overlaps.
    """
    if not candidate.start_date < candidate.end_date:
        return InvalidRangeError(candidate.start_date, candidate.end_date)

    conflicts = find_conflicts(existing, candidate)
    if conflicts:
        clash = conflicts[0]
        return ConflictError(
            conflicting_interval_id=getattr(clash, "id", None),
            conflicting_start_date=clash.start_date,
            conflicting_end_date=clash.end_date,
            requested_start_date=candidate.start_date,
            requested_end_date=candidate.end_date,
        )
    return None
