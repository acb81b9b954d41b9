"""Occupancy analytics built on the interval engine."""

from collections import defaultdict
from typing import Any, Iterable, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from channel_manager.availability import (
    Horizon,
    count_active_in_horizon,
    find_gaps,
    nights_occupied,
    occupancy_rate,
)
from channel_manager.models.booking import Booking
from channel_manager.models.property import Property
from channel_manager.schemas.analytics import AnalyticsSummaryResponse, OccupancyResponse
from channel_manager.schemas.booking import GapResponse


def build_occupancy(prop: Any, bookings: Iterable[Any], horizon: Horizon) -> OccupancyResponse:
    """Occupancy card for one property."""
    bookings = list(bookings)
    occupied = nights_occupied(bookings, horizon)
    gaps = find_gaps(bookings, horizon)
    return OccupancyResponse(
        property_id=prop.id,
        property_name=prop.name,
        horizon_start=horizon.start_date,
        horizon_end=horizon.end_date,
        horizon_nights=horizon.nights,
        nights_occupied=occupied,
        nights_free=horizon.nights - occupied,
        occupancy_rate=occupancy_rate(bookings, horizon),
        active_bookings=count_active_in_horizon(bookings, horizon),
        gaps=[
            GapResponse(start_date=g.start_date, end_date=g.end_date, nights=g.nights)
            for g in gaps
        ],
    )


def build_summary(
    properties: Sequence[Any],
    bookings: Iterable[Any],
    horizon: Horizon,
) -> AnalyticsSummaryResponse:
    """Client-wide totals plus one card per property."""
    by_property: dict[UUID, list[Any]] = defaultdict(list)
    for booking in bookings:
        by_property[booking.property_id].append(booking)

    cards = [build_occupancy(p, by_property.get(p.id, []), horizon) for p in properties]
    occupied = sum(c.nights_occupied for c in cards)
    capacity = horizon.nights * len(cards)

    return AnalyticsSummaryResponse(
        horizon_start=horizon.start_date,
        horizon_end=horizon.end_date,
        horizon_nights=horizon.nights,
        total_properties=len(cards),
        total_bookings=sum(c.active_bookings for c in cards),
        nights_occupied=occupied,
        occupancy_rate=round(occupied / capacity, 4) if capacity else 0.0,
        properties=cards,
    )


class AnalyticsService:
    """Loads a client's properties and bookings for occupancy reporting."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def client_summary(self, client_id: UUID, horizon: Horizon) -> AnalyticsSummaryResponse:
        prop_result = await self.db.execute(
            select(Property)
            .where(Property.client_id == client_id)
            .order_by(Property.name)
        )
        properties = prop_result.scalars().all()

        booking_result = await self.db.execute(
            select(Booking).where(
                Booking.client_id == client_id,
                Booking.start_date < horizon.end_date,
                Booking.end_date > horizon.start_date,
            )
        )
        bookings = booking_result.scalars().all()

        return build_summary(properties, bookings, horizon)
