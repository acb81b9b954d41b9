"""Booking and availability schemas."""

from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import Field, model_validator

from channel_manager.availability.errors import InvalidRangeError
from channel_manager.models.enums import BookingSource
from channel_manager.schemas.base import BaseSchema, IDMixin, IsoDate


class DateRangeRequest(BaseSchema):
    """A half-open ``[start_date, end_date)`` range of nights."""

    start_date: IsoDate
    end_date: IsoDate  # checkout day, not occupied

    @model_validator(mode="after")
    def validate_dates(self):
        """A booking covers at least one night."""
        if self.end_date <= self.start_date:
            raise InvalidRangeError(self.start_date, self.end_date)
        return self


class BookingCreate(DateRangeRequest):
    """Create a new booking."""

    source: BookingSource = BookingSource.MANUAL
    external_uid: Optional[str] = Field(None, max_length=255)
    guest_name: Optional[str] = Field(None, max_length=255)
    guest_email: Optional[str] = Field(None, max_length=255)
    guest_phone: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = None


class BookingResponse(BaseSchema, IDMixin):
    """Booking response."""

    property_id: UUID
    start_date: date
    end_date: date
    nights: int
    source: str
    external_uid: Optional[str] = None
    guest_name: Optional[str] = None
    guest_email: Optional[str] = None
    guest_phone: Optional[str] = None
    notes: Optional[str] = None
    deletable: bool = False
    created_at: datetime


class ConflictDetail(BaseSchema):
    """An existing booking clashing with a requested range."""

    booking_id: UUID
    start_date: date
    end_date: date
    source: str


class AvailabilityCheckResponse(BaseSchema):
    """Result of checking a candidate range against the active bookings."""

    start_date: date
    end_date: date
    nights: int
    available: bool
    conflicts: list[ConflictDetail] = []


class GapResponse(BaseSchema):
    """Free run of nights inside a horizon."""

    start_date: date
    end_date: date
    nights: int


class GapsResponse(BaseSchema):
    """Free ranges of one property inside a horizon."""

    property_id: UUID
    horizon_start: date
    horizon_end: date
    gaps: list[GapResponse]
