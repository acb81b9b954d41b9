"""Services for the channel manager."""

from channel_manager.services.audit import AuditService
from channel_manager.services.bookings import BookingService
from channel_manager.services.notifier import BookingWebhookNotifier, get_booking_notifier
from channel_manager.services.analytics import AnalyticsService

__all__ = [
    "AuditService",
    "BookingService",
    "BookingWebhookNotifier",
    "get_booking_notifier",
    "AnalyticsService",
]
