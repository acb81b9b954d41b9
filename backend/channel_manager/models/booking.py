"""Booking model.

Occupied nights are the half-open range ``[start_date, end_date)``. Overlap
between bookings of the same property is rejected by the
``ex_bookings_no_overlap`` exclusion constraint (see migration 001); the
application-level check in the booking service is only a fast fail.
"""

import uuid
from datetime import datetime, date
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, DateTime, Date, ForeignKey, Text, CheckConstraint, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from channel_manager.core.database import Base

if TYPE_CHECKING:
    from channel_manager.models.property import Property

BOOKING_OVERLAP_CONSTRAINT = "ex_bookings_no_overlap"
BOOKING_RANGE_CONSTRAINT = "ck_bookings_start_before_end"


class Booking(Base):
    """A reservation of one property for a contiguous run of nights.

    Never updated in place: date changes are a delete followed by a create.
    """

    __tablename__ = "bookings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    property_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("properties.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Dates
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)  # checkout day, not occupied

    # Origin (manual, airbnb, booking.com, web)
    source: Mapped[str] = mapped_column(String(50), default="manual", nullable=False)
    external_uid: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)

    # Guest contact
    guest_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    guest_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    guest_phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    property: Mapped["Property"] = relationship("Property", back_populates="bookings")

    __table_args__ = (
        CheckConstraint("start_date < end_date", name=BOOKING_RANGE_CONSTRAINT),
        Index("ix_bookings_property_dates", "property_id", "start_date", "end_date"),
    )
