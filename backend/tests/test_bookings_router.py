"""HTTP tests for the bookings and availability endpoints."""

from datetime import date
from typing import Optional
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from channel_manager.availability import (
    BookingInterval,
    ConflictError,
    DeletionNotAllowedError,
    NotFoundError,
    find_conflicts,
)
from channel_manager.core.horizon import get_today
from channel_manager.core.security import require_client
from channel_manager.models.enums import WebhookEvent
from channel_manager.routers.bookings import get_booking_service
from channel_manager.routers.properties import get_client_property
from channel_manager.services.notifier import get_booking_notifier
from conftest import booking_row, d


class FakeBookingService:
    """In-memory stand-in for BookingService."""

    def __init__(self, bookings=None):
        self.bookings = list(bookings or [])
        self.create_error: Optional[Exception] = None
        self.delete_error: Optional[Exception] = None
        self.windows = []

    def is_deletable(self, booking):
        return booking.source in ("manual", "web")

    async def list_bookings(self, property_id, client_id, window=None):
        self.windows.append(window)
        return sorted(self.bookings, key=lambda b: (b.start_date, b.end_date))

    async def check_availability(self, property_id, client_id, candidate):
        return find_conflicts(self.bookings, candidate)

    async def create_booking(self, property_id, client_id, data, user_id=None, ip_address=None):
        if self.create_error:
            raise self.create_error
        booking = booking_row(
            data.start_date.isoformat(),
            data.end_date.isoformat(),
            property_id,
            source=data.source.value,
            guest_name=data.guest_name,
        )
        self.bookings.append(booking)
        return booking

    async def delete_booking(self, property_id, client_id, booking_id, user_id=None, ip_address=None):
        if self.delete_error:
            raise self.delete_error
        return BookingInterval(
            id=booking_id,
            property_id=property_id,
            start_date=date(2024, 1, 10),
            end_date=date(2024, 1, 15),
            source="manual",
        )


class FakeNotifier:
    def __init__(self, enabled=True):
        self.enabled = enabled
        self.events = []

    async def notify(self, event, booking, client_id):
        self.events.append((event, booking.id, client_id))
        return True


@pytest.fixture
def service():
    return FakeBookingService()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def http(app, service, notifier, current_user, prop):
    app.dependency_overrides[require_client] = lambda: current_user
    app.dependency_overrides[get_client_property] = lambda: prop
    app.dependency_overrides[get_booking_service] = lambda: service
    app.dependency_overrides[get_booking_notifier] = lambda: notifier
    app.dependency_overrides[get_today] = lambda: date(2024, 3, 1)
    return TestClient(app)


def url(prop, path):
    return f"/v1/properties/{prop.id}{path}"


class TestCreateBooking:
    def test_created(self, http, prop, notifier, client_id):
        response = http.post(url(prop, "/bookings"), json={
            "start_date": "2024-01-15",
            "end_date": "2024-01-20",
            "guest_name": "Ana",
        })

        assert response.status_code == 201
        body = response.json()
        assert body["start_date"] == "2024-01-15"
        assert body["end_date"] == "2024-01-20"
        assert body["nights"] == 5
        assert body["source"] == "manual"
        assert body["deletable"] is True
        assert notifier.events == [(WebhookEvent.BOOKING_CREATED, UUID(body["id"]), client_id)]

    def test_datetime_input_keeps_calendar_date(self, http, prop):
        response = http.post(url(prop, "/bookings"), json={
            "start_date": "2024-01-15T23:30:00-05:00",
            "end_date": "2024-01-17",
        })
        assert response.status_code == 201
        assert response.json()["start_date"] == "2024-01-15"

    def test_conflict_names_existing_booking(self, http, prop, service, notifier):
        clash_id = uuid4()
        service.create_error = ConflictError(
            clash_id,
            conflicting_start_date=d("2024-01-10"),
            conflicting_end_date=d("2024-01-15"),
            requested_start_date=d("2024-01-12"),
            requested_end_date=d("2024-01-14"),
        )

        response = http.post(url(prop, "/bookings"), json={"start_date": "2024-01-12", "end_date": "2024-01-14"})

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "booking_conflict"
        assert detail["conflicting_booking_id"] == str(clash_id)
        assert detail["conflicting_start_date"] == "2024-01-10"
        assert notifier.events == []

    @pytest.mark.parametrize("start,end", [("2024-01-20", "2024-01-20"), ("2024-01-20", "2024-01-10")])
    def test_empty_or_inverted_range(self, http, prop, start, end):
        response = http.post(url(prop, "/bookings"), json={"start_date": start, "end_date": end})
        assert response.status_code == 422

    @pytest.mark.parametrize("start", ["15/01/2024", "20240115", "2024-W03-1"])
    def test_malformed_date(self, http, prop, service, start):
        response = http.post(url(prop, "/bookings"), json={"start_date": start, "end_date": "2024-01-20"})
        assert response.status_code == 422
        assert service.bookings == []

    def test_unknown_source(self, http, prop):
        response = http.post(url(prop, "/bookings"), json={
            "start_date": "2024-01-15",
            "end_date": "2024-01-20",
            "source": "vrbo",
        })
        assert response.status_code == 422

    def test_webhook_skipped_when_disabled(self, http, prop, notifier):
        notifier.enabled = False
        response = http.post(url(prop, "/bookings"), json={"start_date": "2024-01-15", "end_date": "2024-01-20"})
        assert response.status_code == 201
        assert notifier.events == []


class TestListBookings:
    def test_lists_chronologically(self, http, prop, service):
        service.bookings = [
            booking_row("2024-02-01", "2024-02-03", prop.id, source="airbnb"),
            booking_row("2024-01-10", "2024-01-15", prop.id),
        ]

        response = http.get(url(prop, "/bookings"))

        assert response.status_code == 200
        body = response.json()
        assert [b["start_date"] for b in body] == ["2024-01-10", "2024-02-01"]
        assert [b["deletable"] for b in body] == [True, False]
        assert service.windows == [None]

    def test_window_filter(self, http, prop, service):
        response = http.get(url(prop, "/bookings"), params={"start": "2024-01-01", "end": "2024-02-01"})
        assert response.status_code == 200
        window = service.windows[0]
        assert (window.start_date, window.end_date) == (d("2024-01-01"), d("2024-02-01"))

    def test_window_needs_both_ends(self, http, prop):
        response = http.get(url(prop, "/bookings"), params={"start": "2024-01-01"})
        assert response.status_code == 422

    def test_inverted_window(self, http, prop):
        response = http.get(url(prop, "/bookings"), params={"start": "2024-02-01", "end": "2024-01-01"})
        assert response.status_code == 422


class TestDeleteBooking:
    def test_deleted(self, http, prop, notifier, client_id):
        booking_id = uuid4()
        response = http.delete(url(prop, f"/bookings/{booking_id}"))

        assert response.status_code == 204
        assert notifier.events == [(WebhookEvent.BOOKING_DELETED, booking_id, client_id)]

    def test_not_found(self, http, prop, service, notifier):
        booking_id = uuid4()
        service.delete_error = NotFoundError(booking_id)

        response = http.delete(url(prop, f"/bookings/{booking_id}"))

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "booking_not_found"
        assert notifier.events == []

    def test_synced_booking_is_forbidden(self, http, prop, service):
        booking_id = uuid4()
        service.delete_error = DeletionNotAllowedError(booking_id, "booking.com")

        response = http.delete(url(prop, f"/bookings/{booking_id}"))

        assert response.status_code == 403
        assert "booking.com" in response.json()["detail"]["message"]


class TestAvailability:
    def test_free_range(self, http, prop, service):
        service.bookings = [booking_row("2024-01-10", "2024-01-15", prop.id)]

        response = http.post(url(prop, "/availability/check"), json={"start_date": "2024-01-15", "end_date": "2024-01-18"})

        assert response.status_code == 200
        body = response.json()
        assert body["available"] is True
        assert body["nights"] == 3
        assert body["conflicts"] == []

    def test_taken_range_lists_conflicts(self, http, prop, service):
        clash = booking_row("2024-01-10", "2024-01-15", prop.id, source="airbnb")
        service.bookings = [clash]

        response = http.post(url(prop, "/availability/check"), json={"start_date": "2024-01-14", "end_date": "2024-01-16"})

        body = response.json()
        assert body["available"] is False
        assert body["conflicts"] == [{
            "booking_id": str(clash.id),
            "start_date": "2024-01-10",
            "end_date": "2024-01-15",
            "source": "airbnb",
        }]

    def test_gaps_default_horizon(self, http, prop, service):
        service.bookings = [
            booking_row("2024-03-01", "2024-03-05", prop.id),
            booking_row("2024-03-10", "2024-03-15", prop.id),
        ]

        response = http.get(url(prop, "/availability/gaps"))

        assert response.status_code == 200
        body = response.json()
        assert body["horizon_start"] == "2024-03-01"
        assert body["horizon_end"] == "2024-03-31"
        assert body["gaps"] == [
            {"start_date": "2024-03-05", "end_date": "2024-03-10", "nights": 5},
            {"start_date": "2024-03-15", "end_date": "2024-03-31", "nights": 16},
        ]

    def test_gaps_explicit_horizon(self, http, prop, service):
        response = http.get(url(prop, "/availability/gaps"), params={"start": "2024-06-01", "days": 7})

        assert response.json()["gaps"] == [
            {"start_date": "2024-06-01", "end_date": "2024-06-08", "nights": 7},
        ]

    def test_gaps_rejects_inverted_horizon(self, http, prop):
        response = http.get(url(prop, "/availability/gaps"), params={"start": "2024-06-10", "end": "2024-06-01"})
        assert response.status_code == 422
