"""Audit logging service."""

from typing import Any, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from channel_manager.models.audit import AuditLog
from channel_manager.models.enums import AuditAction


class AuditService:
    """Service for creating audit log entries.

    Entries are added to the caller's session and committed with the mutation
    they describe.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log(
        self,
        action: AuditAction,
        resource_type: str,
        resource_id: UUID,
        client_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        details: Optional[dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> AuditLog:
        """Create an audit log entry."""
        entry = AuditLog(
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            client_id=client_id,
            user_id=user_id,
            details=details or {},
            ip_address=ip_address,
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def log_booking_created(
        self,
        booking_id: UUID,
        property_id: UUID,
        client_id: UUID,
        user_id: Optional[UUID],
        start_date: str,
        end_date: str,
        source: str,
        ip_address: Optional[str] = None,
    ) -> AuditLog:
        """Log booking created."""
        return await self.log(
            action=AuditAction.BOOKING_CREATED,
            resource_type="booking",
            resource_id=booking_id,
            client_id=client_id,
            user_id=user_id,
            details={
                "property_id": str(property_id),
                "start_date": start_date,
                "end_date": end_date,
                "source": source,
            },
            ip_address=ip_address,
        )

    async def log_booking_deleted(
        self,
        booking_id: UUID,
        property_id: UUID,
        client_id: UUID,
        user_id: Optional[UUID],
        start_date: str,
        end_date: str,
        source: str,
        ip_address: Optional[str] = None,
    ) -> AuditLog:
        """Log booking deleted."""
        return await self.log(
            action=AuditAction.BOOKING_DELETED,
            resource_type="booking",
            resource_id=booking_id,
            client_id=client_id,
            user_id=user_id,
            details={
                "property_id": str(property_id),
                "start_date": start_date,
                "end_date": end_date,
                "source": source,
            },
            ip_address=ip_address,
        )

    async def log_property_change(
        self,
        action: AuditAction,
        property_id: UUID,
        client_id: UUID,
        user_id: Optional[UUID],
        changes: Optional[dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> AuditLog:
        """Log property created, updated or deleted."""
        return await self.log(
            action=action,
            resource_type="property",
            resource_id=property_id,
            client_id=client_id,
            user_id=user_id,
            details=changes,
            ip_address=ip_address,
        )
