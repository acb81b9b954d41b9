"""Property model."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from channel_manager.core.database import Base

if TYPE_CHECKING:
    from channel_manager.models.client import Client
    from channel_manager.models.booking import Booking


class Property(Base):
    """A rental property managed by a client."""

    __tablename__ = "properties"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    client_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Channel feed URLs (stored for the owner, not fetched by this service)
    airbnb_ical: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    booking_ical: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # Relationships
    client: Mapped["Client"] = relationship("Client", back_populates="properties")
    bookings: Mapped[list["Booking"]] = relationship(
        "Booking", back_populates="property", cascade="all, delete-orphan", passive_deletes=True
    )
