"""Property schemas."""

from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from channel_manager.schemas.base import BaseSchema, IDMixin, TimestampMixin


def _check_feed_url(value: Optional[str]) -> Optional[str]:
    """Empty strings clear the feed; anything else must be an http(s) URL."""
    if value is None or value == "":
        return None
    if not value.startswith(("http://", "https://")):
        raise ValueError("iCal feed URL must start with http:// or https://")
    return value


class PropertyCreate(BaseSchema):
    """Create a new property."""

    name: str = Field(..., min_length=2, max_length=255)
    location: str = Field(..., min_length=2, max_length=255)
    airbnb_ical: Optional[str] = Field(None, max_length=2048)
    booking_ical: Optional[str] = Field(None, max_length=2048)

    @field_validator("airbnb_ical", "booking_ical")
    @classmethod
    def validate_feed_url(cls, value: Optional[str]) -> Optional[str]:
        return _check_feed_url(value)


class PropertyUpdate(BaseSchema):
    """Update property."""

    name: Optional[str] = Field(None, min_length=2, max_length=255)
    location: Optional[str] = Field(None, min_length=2, max_length=255)
    airbnb_ical: Optional[str] = Field(None, max_length=2048)
    booking_ical: Optional[str] = Field(None, max_length=2048)

    @field_validator("airbnb_ical", "booking_ical")
    @classmethod
    def validate_feed_url(cls, value: Optional[str]) -> Optional[str]:
        return _check_feed_url(value)


class PropertyResponse(BaseSchema, IDMixin, TimestampMixin):
    """Property response."""

    client_id: UUID
    name: str
    location: str
    airbnb_ical: Optional[str] = None
    booking_ical: Optional[str] = None
