"""Occupancy analytics schemas."""

from datetime import date
from uuid import UUID

from channel_manager.schemas.base import BaseSchema
from channel_manager.schemas.booking import GapResponse


class OccupancyResponse(BaseSchema):
    """Occupancy of one property over a horizon."""

    property_id: UUID
    property_name: str
    horizon_start: date
    horizon_end: date
    horizon_nights: int
    nights_occupied: int
    nights_free: int
    occupancy_rate: float
    active_bookings: int
    gaps: list[GapResponse]


class AnalyticsSummaryResponse(BaseSchema):
    """Client-wide occupancy over a horizon."""

    horizon_start: date
    horizon_end: date
    horizon_nights: int
    total_properties: int
    total_bookings: int
    nights_occupied: int
    occupancy_rate: float
    properties: list[OccupancyResponse]
