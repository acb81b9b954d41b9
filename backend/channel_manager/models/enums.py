"""Enumeration types for the channel manager domain model."""

from enum import Enum


class BookingSource(str, Enum):
    """Where a booking originated. Display and deletion policy only."""
    MANUAL = "manual"
    AIRBNB = "airbnb"
    BOOKING_COM = "booking.com"
    WEB = "web"


class AuditAction(str, Enum):
    """Actions tracked in audit log."""
    BOOKING_CREATED = "booking_created"
    BOOKING_DELETED = "booking_deleted"
    PROPERTY_CREATED = "property_created"
    PROPERTY_UPDATED = "property_updated"
    PROPERTY_DELETED = "property_deleted"


class WebhookEvent(str, Enum):
    """Outbound webhook event names."""
    BOOKING_CREATED = "booking.created"
    BOOKING_DELETED = "booking.deleted"
