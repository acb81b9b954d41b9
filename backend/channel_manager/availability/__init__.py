"""Booking interval engine: overlap, gap and occupancy arithmetic.

Framework free. Imported by the booking service, the availability endpoints
and analytics so that there is one implementation of the date math.
"""

from channel_manager.availability.dates import (
    DateOutOfRangeError,
    InvalidDateError,
    days_between,
    exclusive_to_inclusive,
    inclusive_to_exclusive,
    iter_nights,
    parse_iso_date,
)
from channel_manager.availability.errors import (
    BookingError,
    ConflictError,
    DeletionNotAllowedError,
    InvalidRangeError,
    NotFoundError,
)
from channel_manager.availability.intervals import (
    BookingInterval,
    DateSpan,
    Gap,
    Horizon,
    can_create,
    count_active_in_horizon,
    find_conflicts,
    find_gaps,
    horizon_from,
    merge_intervals,
    nights_occupied,
    occupancy_rate,
    overlaps,
)

__all__ = [
    "DateOutOfRangeError",
    "InvalidDateError",
    "days_between",
    "exclusive_to_inclusive",
    "inclusive_to_exclusive",
    "iter_nights",
    "parse_iso_date",
    "BookingError",
    "ConflictError",
    "DeletionNotAllowedError",
    "InvalidRangeError",
    "NotFoundError",
    "BookingInterval",
    "DateSpan",
    "Gap",
    "Horizon",
    "can_create",
    "count_active_in_horizon",
    "find_conflicts",
    "find_gaps",
    "horizon_from",
    "merge_intervals",
    "nights_occupied",
    "occupancy_rate",
    "overlaps",
]
