"""SQLAlchemy models for the channel manager."""

from channel_manager.models.user import User
from channel_manager.models.client import Client
from channel_manager.models.property import Property
from channel_manager.models.booking import Booking
from channel_manager.models.audit import AuditLog

__all__ = [
    "User",
    "Client",
    "Property",
    "Booking",
    "AuditLog",
]
