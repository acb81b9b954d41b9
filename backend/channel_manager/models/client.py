"""Client (tenant) model."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from channel_manager.core.database import Base

if TYPE_CHECKING:
    from channel_manager.models.user import User
    from channel_manager.models.property import Property


class Client(Base):
    """A property owner account. Every property and booking is scoped to one client."""

    __tablename__ = "clients"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="clients")
    properties: Mapped[list["Property"]] = relationship(
        "Property", back_populates="client", cascade="all, delete-orphan", passive_deletes=True
    )
