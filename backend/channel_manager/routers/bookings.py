"""Bookings and availability router.

Creates and interactive range checks share the interval engine through
``BookingService``; no date arithmetic lives in this module.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from channel_manager.availability import (
    BookingInterval,
    ConflictError,
    DateSpan,
    DeletionNotAllowedError,
    Horizon,
    InvalidRangeError,
    NotFoundError,
    days_between,
    find_gaps,
)
from channel_manager.core.database import get_db
from channel_manager.core.horizon import parse_query_date, resolve_horizon
from channel_manager.core.security import require_client, AuthenticatedUser, client_ip
from channel_manager.models.booking import Booking
from channel_manager.models.enums import WebhookEvent
from channel_manager.models.property import Property
from channel_manager.routers.properties import get_client_property
from channel_manager.schemas.booking import (
    AvailabilityCheckResponse,
    BookingCreate,
    BookingResponse,
    ConflictDetail,
    DateRangeRequest,
    GapResponse,
    GapsResponse,
)
from channel_manager.services.bookings import BookingService
from channel_manager.services.notifier import BookingWebhookNotifier, get_booking_notifier

router = APIRouter(prefix="/properties/{property_id}", tags=["bookings"])


def get_booking_service(db: AsyncSession = Depends(get_db)) -> BookingService:
    return BookingService(db)


def booking_response(booking: Booking, service: BookingService) -> BookingResponse:
    return BookingResponse(
        id=booking.id,
        property_id=booking.property_id,
        start_date=booking.start_date,
        end_date=booking.end_date,
        nights=days_between(booking.start_date, booking.end_date),
        source=booking.source,
        external_uid=booking.external_uid,
        guest_name=booking.guest_name,
        guest_email=booking.guest_email,
        guest_phone=booking.guest_phone,
        notes=booking.notes,
        deletable=service.is_deletable(booking),
        created_at=booking.created_at,
    )


@router.get("/bookings", response_model=List[BookingResponse])
async def list_bookings(
    start: Optional[str] = None,
    end: Optional[str] = None,
    prop: Property = Depends(get_client_property),
    service: BookingService = Depends(get_booking_service),
    current_user: AuthenticatedUser = Depends(require_client),
):
    """List a property's bookings, optionally only those touching ``[start, end)``."""
    window = None
    if start is not None or end is not None:
        window_start = parse_query_date("start", start)
        window_end = parse_query_date("end", end)
        if window_start is None or window_end is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="start and end must be given together",
            )
        window = DateSpan(window_start, window_end)
        if not window.is_valid():
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail="end must be after start",
            )

    bookings = await service.list_bookings(prop.id, current_user.client_id, window=window)
    return [booking_response(b, service) for b in bookings]


@router.post("/bookings", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreate,
    request: Request,
    background_tasks: BackgroundTasks,
    prop: Property = Depends(get_client_property),
    service: BookingService = Depends(get_booking_service),
    notifier: BookingWebhookNotifier = Depends(get_booking_notifier),
    current_user: AuthenticatedUser = Depends(require_client),
):
    """Create a booking.

    Returns 409 naming the clashing booking when the nights are taken.
    """
    try:
        booking = await service.create_booking(
            property_id=prop.id,
            client_id=current_user.client_id,
            data=data,
            user_id=current_user.db_user_id,
            ip_address=client_ip(request),
        )
    except ConflictError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.to_dict())
    except InvalidRangeError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=e.to_dict())

    if notifier.enabled:
        background_tasks.add_task(
            notifier.notify,
            WebhookEvent.BOOKING_CREATED,
            BookingInterval.from_record(booking),
            current_user.client_id,
        )

    return booking_response(booking, service)


@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_booking(
    booking_id: UUID,
    request: Request,
    background_tasks: BackgroundTasks,
    prop: Property = Depends(get_client_property),
    service: BookingService = Depends(get_booking_service),
    notifier: BookingWebhookNotifier = Depends(get_booking_notifier),
    current_user: AuthenticatedUser = Depends(require_client),
):
    """Delete a manually entered booking. Synced channel bookings are read-only."""
    try:
        deleted = await service.delete_booking(
            property_id=prop.id,
            client_id=current_user.client_id,
            booking_id=booking_id,
            user_id=current_user.db_user_id,
            ip_address=client_ip(request),
        )
    except NotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.to_dict())
    except DeletionNotAllowedError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.to_dict())

    if notifier.enabled:
        background_tasks.add_task(
            notifier.notify,
            WebhookEvent.BOOKING_DELETED,
            deleted,
            current_user.client_id,
        )

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/availability/check", response_model=AvailabilityCheckResponse)
async def check_availability(
    data: DateRangeRequest,
    prop: Property = Depends(get_client_property),
    service: BookingService = Depends(get_booking_service),
    current_user: AuthenticatedUser = Depends(require_client),
):
    """Check whether a selected range is free, before opening the booking form."""
    candidate = DateSpan(data.start_date, data.end_date)
    conflicts = await service.check_availability(prop.id, current_user.client_id, candidate)

    return AvailabilityCheckResponse(
        start_date=candidate.start_date,
        end_date=candidate.end_date,
        nights=candidate.nights,
        available=not conflicts,
        conflicts=[
            ConflictDetail(
                booking_id=c.id,
                start_date=c.start_date,
                end_date=c.end_date,
                source=c.source,
            )
            for c in conflicts
        ],
    )


@router.get("/availability/gaps", response_model=GapsResponse)
async def list_gaps(
    horizon: Horizon = Depends(resolve_horizon),
    prop: Property = Depends(get_client_property),
    service: BookingService = Depends(get_booking_service),
    current_user: AuthenticatedUser = Depends(require_client),
):
    """Free ranges of the property within the horizon (default: next 30 nights)."""
    bookings = await service.list_bookings(prop.id, current_user.client_id, window=horizon)
    gaps = find_gaps(bookings, horizon)

    return GapsResponse(
        property_id=prop.id,
        horizon_start=horizon.start_date,
        horizon_end=horizon.end_date,
        gaps=[GapResponse(start_date=g.start_date, end_date=g.end_date, nights=g.nights) for g in gaps],
    )
