"""Booking domain errors.

The interval engine returns these as values; the service layer raises them and
routers translate them into HTTP responses.
"""

from datetime import date
from typing import Optional
from uuid import UUID


class BookingError(Exception):
    """Base class for expected booking business conditions."""

    code = "booking_error"

    def to_dict(self) -> dict:
        return {"code": self.code, "message": str(self)}


class InvalidRangeError(BookingError, ValueError):
    """Start date is not strictly before end date."""

    code = "invalid_range"

    def __init__(self, start_date: date, end_date: date):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            f"start_date ({start_date.isoformat()}) must be before end_date ({end_date.isoformat()})"
        )


class ConflictError(BookingError):
    """Candidate range overlaps an existing active booking.

    ``conflicting_interval_id`` is None only when the store rejected the insert
    and the clashing booking was gone by the time it was re-read.
    """

    code = "booking_conflict"

    def __init__(
        self,
        conflicting_interval_id: Optional[UUID],
        conflicting_start_date: Optional[date] = None,
        conflicting_end_date: Optional[date] = None,
        requested_start_date: Optional[date] = None,
        requested_end_date: Optional[date] = None,
    ):
        self.conflicting_interval_id = conflicting_interval_id
        self.conflicting_start_date = conflicting_start_date
        self.conflicting_end_date = conflicting_end_date
        self.requested_start_date = requested_start_date
        self.requested_end_date = requested_end_date
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        if self.requested_start_date and self.requested_end_date:
            message = (
                f"Dates {self.requested_start_date.isoformat()} to "
                f"{self.requested_end_date.isoformat()} overlap"
            )
        else:
            message = "Requested dates overlap"
        if self.conflicting_interval_id is None:
            return f"{message} an existing booking"
        message += f" booking {self.conflicting_interval_id}"
        if self.conflicting_start_date and self.conflicting_end_date:
            message += (
                f" ({self.conflicting_start_date.isoformat()} to "
                f"{self.conflicting_end_date.isoformat()})"
            )
        return message

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": str(self),
            "conflicting_booking_id": (
                str(self.conflicting_interval_id) if self.conflicting_interval_id else None
            ),
            "conflicting_start_date": (
                self.conflicting_start_date.isoformat() if self.conflicting_start_date else None
            ),
            "conflicting_end_date": (
                self.conflicting_end_date.isoformat() if self.conflicting_end_date else None
            ),
        }


class NotFoundError(BookingError):
    """Booking id is not in the active set."""

    code = "booking_not_found"

    def __init__(self, interval_id: UUID):
        self.interval_id = interval_id
        super().__init__(f"Booking {interval_id} not found")


class DeletionNotAllowedError(BookingError):
    """Booking exists but its source is read-only from this system."""

    code = "deletion_not_allowed"

    def __init__(self, interval_id: UUID, source: str):
        self.interval_id = interval_id
        self.source = source
        super().__init__(
            f"Booking {interval_id} was synced from '{source}' and cannot be deleted here"
        )
