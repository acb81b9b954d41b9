"""
Outbound booking webhook.

Fired after a booking is created or deleted so that external calendar feeds
can refresh. Delivery is best effort: failures are logged and never reach the
user who made the change.
"""

import logging
from datetime import datetime
from typing import Any, Optional
from uuid import UUID

import httpx

from channel_manager.core.config import get_settings
from channel_manager.models.enums import WebhookEvent

logger = logging.getLogger(__name__)


class BookingWebhookNotifier:
    """POSTs booking mutation events to a configured URL."""

    def __init__(
        self,
        url: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def build_payload(self, event: WebhookEvent, booking: Any, client_id: UUID) -> dict:
        """JSON body for one event. ``booking`` needs id, property_id, dates and source."""
        return {
            "event": event.value,
            "booking_id": str(booking.id),
            "property_id": str(booking.property_id),
            "client_id": str(client_id),
            "start_date": booking.start_date.isoformat(),
            "end_date": booking.end_date.isoformat(),
            "source": booking.source,
            "occurred_at": datetime.utcnow().strftime("%Y-%m-%dT%H:%M:%SZ"),
        }

    async def notify(self, event: WebhookEvent, booking: Any, client_id: UUID) -> bool:
        """Send one event. Returns True when the receiver accepted it."""
        if not self.url:
            return False

        payload = self.build_payload(event, booking, client_id)
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"[WEBHOOK] {event.value} for booking {booking.id} failed: {e}")
            return False

        if response.status_code >= 400:
            logger.warning(
                f"[WEBHOOK] {event.value} for booking {booking.id} rejected: {response.status_code}"
            )
            return False

        logger.info(f"[WEBHOOK] {event.value} delivered for booking {booking.id}")
        return True


def get_booking_notifier() -> BookingWebhookNotifier:
    """Notifier configured from settings."""
    settings = get_settings()
    return BookingWebhookNotifier(
        url=settings.booking_webhook_url,
        timeout=settings.webhook_timeout_seconds,
    )
