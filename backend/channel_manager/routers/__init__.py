"""API Routers for the channel manager."""

from channel_manager.routers.properties import router as properties_router
from channel_manager.routers.bookings import router as bookings_router
from channel_manager.routers.analytics import router as analytics_router

__all__ = [
    "properties_router",
    "bookings_router",
    "analytics_router",
]
