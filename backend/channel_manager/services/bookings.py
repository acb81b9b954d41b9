"""Booking persistence, scoped to the authenticated client.

The overlap check here is a fast fail. The authoritative guard is the
``ex_bookings_no_overlap`` exclusion constraint; creation also holds a row
lock on the property so that concurrent creates for one property serialize.
"""

import logging
import uuid
from datetime import datetime
from typing import Iterable, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from channel_manager.availability import (
    BookingInterval,
    ConflictError,
    DateSpan,
    DeletionNotAllowedError,
    InvalidRangeError,
    NotFoundError,
    can_create,
    find_conflicts,
)
from channel_manager.core.config import get_settings
from channel_manager.models.booking import Booking, BOOKING_OVERLAP_CONSTRAINT
from channel_manager.models.property import Property
from channel_manager.schemas.booking import BookingCreate
from channel_manager.services.audit import AuditService

logger = logging.getLogger(__name__)


class BookingService:
    """List, create and delete bookings of one client's properties."""

    def __init__(self, db: AsyncSession, deletable_sources: Optional[Iterable[str]] = None):
        self.db = db
        if deletable_sources is None:
            deletable_sources = get_settings().deletable_sources
        self.deletable_sources = tuple(deletable_sources)

    def is_deletable(self, booking: Booking) -> bool:
        return booking.source in self.deletable_sources

    async def list_bookings(
        self,
        property_id: UUID,
        client_id: UUID,
        window: Optional[DateSpan] = None,
    ) -> list[Booking]:
        """Active bookings of a property, chronological.

        With ``window`` only bookings sharing a night with it are returned.
        """
        query = select(Booking).where(
            Booking.property_id == property_id,
            Booking.client_id == client_id,
        )
        if window is not None:
            query = query.where(
                Booking.start_date < window.end_date,
                Booking.end_date > window.start_date,
            )
        query = query.order_by(Booking.start_date, Booking.end_date)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def check_availability(
        self,
        property_id: UUID,
        client_id: UUID,
        candidate: DateSpan,
    ) -> list[Booking]:
        """Bookings that would clash with ``candidate``; empty when it is free.

        Empty exactly when ``can_create`` would let ``create_booking`` through,
        since both apply the same range rule and overlap predicate.
        """
        if not candidate.start_date < candidate.end_date:
            raise InvalidRangeError(candidate.start_date, candidate.end_date)
        existing = await self.list_bookings(property_id, client_id, window=candidate)
        return find_conflicts(existing, candidate)

    async def create_booking(
        self,
        property_id: UUID,
        client_id: UUID,
        data: BookingCreate,
        user_id: Optional[UUID] = None,
        ip_address: Optional[str] = None,
    ) -> Booking:
        """Store a booking after the overlap gate.

        Raises:
            InvalidRangeError: start is not before end
            ConflictError: the range overlaps an active booking
        """
        candidate = DateSpan(data.start_date, data.end_date)

        # Serialize creates for this property until commit
        await self.db.execute(
            select(Property.id)
            .where(Property.id == property_id, Property.client_id == client_id)
            .with_for_update()
        )

        existing = await self.list_bookings(property_id, client_id, window=candidate)
        error = can_create(existing, candidate)
        if error is not None:
            await self.db.rollback()
            logger.info(f"[BOOKINGS] Rejected booking for property {property_id}: {error}")
            raise error

        booking = Booking(
            id=uuid.uuid4(),
            property_id=property_id,
            client_id=client_id,
            start_date=data.start_date,
            end_date=data.end_date,
            source=data.source.value,
            external_uid=data.external_uid,
            guest_name=data.guest_name,
            guest_email=data.guest_email,
            guest_phone=data.guest_phone,
            notes=data.notes,
            created_at=datetime.utcnow(),
        )
        self.db.add(booking)
        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            if BOOKING_OVERLAP_CONSTRAINT not in str(e.orig):
                raise
            logger.warning(
                f"[BOOKINGS] Store rejected overlapping booking for property {property_id}"
            )
            conflict = await self._conflict_from_store(property_id, client_id, candidate)
            raise conflict from e

        audit = AuditService(self.db)
        await audit.log_booking_created(
            booking_id=booking.id,
            property_id=property_id,
            client_id=client_id,
            user_id=user_id,
            start_date=booking.start_date.isoformat(),
            end_date=booking.end_date.isoformat(),
            source=booking.source,
            ip_address=ip_address,
        )

        await self.db.commit()
        await self.db.refresh(booking)

        logger.info(
            f"[BOOKINGS] Created booking {booking.id} for property {property_id} "
            f"({booking.start_date} to {booking.end_date}, {booking.source})"
        )
        return booking

    async def _conflict_from_store(
        self,
        property_id: UUID,
        client_id: UUID,
        candidate: DateSpan,
    ) -> ConflictError:
        """Re-read the clashing booking after the constraint fired."""
        existing = await self.list_bookings(property_id, client_id, window=candidate)
        error = can_create(existing, candidate)
        if isinstance(error, ConflictError):
            return error
        return ConflictError(
            conflicting_interval_id=None,
            requested_start_date=candidate.start_date,
            requested_end_date=candidate.end_date,
        )

    async def delete_booking(
        self,
        property_id: UUID,
        client_id: UUID,
        booking_id: UUID,
        user_id: Optional[UUID] = None,
        ip_address: Optional[str] = None,
    ) -> BookingInterval:
        """Delete a booking in one scoped statement and return what was removed.

        The property, client and source filters are part of the DELETE itself,
        so a row synced in between a read and the delete can never be removed.

        Raises:
            NotFoundError: no such booking for this client and property
            DeletionNotAllowedError: the booking's source is read-only
        """
        result = await self.db.execute(
            delete(Booking)
            .where(
                Booking.id == booking_id,
                Booking.property_id == property_id,
                Booking.client_id == client_id,
                Booking.source.in_(self.deletable_sources),
            )
            .returning(
                Booking.id,
                Booking.property_id,
                Booking.start_date,
                Booking.end_date,
                Booking.source,
                Booking.created_at,
            )
            .execution_options(synchronize_session=False)
        )
        row = result.one_or_none()

        if row is None:
            remaining = await self.db.execute(
                select(Booking.source).where(
                    Booking.id == booking_id,
                    Booking.property_id == property_id,
                    Booking.client_id == client_id,
                )
            )
            source = remaining.scalar_one_or_none()
            await self.db.rollback()
            if source is None:
                raise NotFoundError(booking_id)
            logger.info(f"[BOOKINGS] Refused to delete {source} booking {booking_id}")
            raise DeletionNotAllowedError(booking_id, source)

        deleted = BookingInterval.from_record(row)

        audit = AuditService(self.db)
        await audit.log_booking_deleted(
            booking_id=deleted.id,
            property_id=property_id,
            client_id=client_id,
            user_id=user_id,
            start_date=deleted.start_date.isoformat(),
            end_date=deleted.end_date.isoformat(),
            source=deleted.source,
            ip_address=ip_address,
        )
        await self.db.commit()

        logger.info(f"[BOOKINGS] Deleted booking {deleted.id} for property {property_id}")
        return deleted
