"""Properties router."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from channel_manager.core.database import get_db
from channel_manager.core.security import require_client, AuthenticatedUser, client_ip
from channel_manager.models.enums import AuditAction
from channel_manager.models.property import Property
from channel_manager.schemas.property import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
)
from channel_manager.services.audit import AuditService

router = APIRouter(prefix="/properties", tags=["properties"])


async def get_client_property(
    property_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_client),
) -> Property:
    """Get property and verify it belongs to the user's client."""
    result = await db.execute(
        select(Property).where(
            Property.id == property_id,
            Property.client_id == current_user.client_id,
        )
    )
    prop = result.scalar_one_or_none()

    if not prop:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Property not found")

    return prop


@router.post("", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
async def create_property(
    data: PropertyCreate,
    request: Request,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_client),
):
    """Create a new property (client-scoped)."""
    prop = Property(
        client_id=current_user.client_id,
        name=data.name,
        location=data.location,
        airbnb_ical=data.airbnb_ical,
        booking_ical=data.booking_ical,
    )
    db.add(prop)
    await db.flush()

    audit = AuditService(db)
    await audit.log_property_change(
        action=AuditAction.PROPERTY_CREATED,
        property_id=prop.id,
        client_id=current_user.client_id,
        user_id=current_user.db_user_id,
        changes={"name": data.name, "location": data.location},
        ip_address=client_ip(request),
    )

    await db.commit()
    await db.refresh(prop)

    return PropertyResponse.model_validate(prop)


@router.get("", response_model=List[PropertyResponse])
async def list_properties(
    location: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_client),
):
    """List all properties for the client, optionally for one location."""
    query = select(Property).where(Property.client_id == current_user.client_id)
    if location:
        query = query.where(Property.location == location)
    query = query.order_by(Property.name)

    result = await db.execute(query)
    return [PropertyResponse.model_validate(p) for p in result.scalars().all()]


@router.get("/locations", response_model=List[str])
async def list_locations(
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_client),
):
    """Distinct locations of the client's properties."""
    result = await db.execute(
        select(Property.location)
        .where(Property.client_id == current_user.client_id)
        .distinct()
        .order_by(Property.location)
    )
    return list(result.scalars().all())


@router.get("/{property_id}", response_model=PropertyResponse)
async def get_property(prop: Property = Depends(get_client_property)):
    """Get a property by ID."""
    return PropertyResponse.model_validate(prop)


@router.patch("/{property_id}", response_model=PropertyResponse)
async def update_property(
    data: PropertyUpdate,
    request: Request,
    prop: Property = Depends(get_client_property),
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_client),
):
    """Update a property's name, location or channel feed URLs."""
    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(prop, field, value)

    audit = AuditService(db)
    await audit.log_property_change(
        action=AuditAction.PROPERTY_UPDATED,
        property_id=prop.id,
        client_id=current_user.client_id,
        user_id=current_user.db_user_id,
        changes={"fields": sorted(update_data)},
        ip_address=client_ip(request),
    )

    await db.commit()
    await db.refresh(prop)

    return PropertyResponse.model_validate(prop)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_property(
    request: Request,
    prop: Property = Depends(get_client_property),
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(require_client),
):
    """Delete a property together with its bookings."""
    audit = AuditService(db)
    await audit.log_property_change(
        action=AuditAction.PROPERTY_DELETED,
        property_id=prop.id,
        client_id=current_user.client_id,
        user_id=current_user.db_user_id,
        changes={"name": prop.name},
        ip_address=client_ip(request),
    )
    await db.delete(prop)
    await db.commit()

    return Response(status_code=status.HTTP_204_NO_CONTENT)
