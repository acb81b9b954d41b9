"""Analytics router - occupancy over a horizon."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from channel_manager.availability import Horizon
from channel_manager.core.database import get_db
from channel_manager.core.horizon import resolve_horizon
from channel_manager.core.security import require_client, AuthenticatedUser
from channel_manager.models.property import Property
from channel_manager.routers.bookings import get_booking_service
from channel_manager.routers.properties import get_client_property
from channel_manager.schemas.analytics import AnalyticsSummaryResponse, OccupancyResponse
from channel_manager.services.analytics import AnalyticsService, build_occupancy
from channel_manager.services.bookings import BookingService

router = APIRouter(prefix="/analytics", tags=["analytics"])


def get_analytics_service(db: AsyncSession = Depends(get_db)) -> AnalyticsService:
    return AnalyticsService(db)


@router.get("/summary", response_model=AnalyticsSummaryResponse)
async def get_summary(
    horizon: Horizon = Depends(resolve_horizon),
    service: AnalyticsService = Depends(get_analytics_service),
    current_user: AuthenticatedUser = Depends(require_client),
):
    """Occupancy across every property of the client."""
    return await service.client_summary(current_user.client_id, horizon)


@router.get("/properties/{property_id}/occupancy", response_model=OccupancyResponse)
async def get_property_occupancy(
    horizon: Horizon = Depends(resolve_horizon),
    prop: Property = Depends(get_client_property),
    service: BookingService = Depends(get_booking_service),
    current_user: AuthenticatedUser = Depends(require_client),
):
    """Occupied nights, occupancy rate and free gaps of one property."""
    bookings = await service.list_bookings(prop.id, current_user.client_id, window=horizon)
    return build_occupancy(prop, bookings, horizon)
