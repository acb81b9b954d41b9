"""Tests for BookingService against a mocked async session."""

import asyncio
from datetime import datetime
from types import SimpleNamespace
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import IntegrityError

from channel_manager.availability import (
    BookingInterval,
    ConflictError,
    DateSpan,
    DeletionNotAllowedError,
    InvalidRangeError,
    NotFoundError,
    can_create,
)
from channel_manager.models.audit import AuditLog
from channel_manager.models.booking import Booking
from channel_manager.models.enums import AuditAction, BookingSource
from channel_manager.schemas.booking import BookingCreate
from channel_manager.services.bookings import BookingService
from conftest import booking_row, d, make_result


@pytest.fixture
def property_id():
    return uuid4()


@pytest.fixture
def service(db):
    return BookingService(db, deletable_sources=("manual", "web"))


def added(db, model):
    return [call.args[0] for call in db.add.call_args_list if isinstance(call.args[0], model)]


class TestIsDeletable:
    def test_follows_configured_sources(self, service, property_id):
        assert service.is_deletable(booking_row("2024-01-01", "2024-01-03", property_id, source="manual"))
        assert service.is_deletable(booking_row("2024-01-01", "2024-01-03", property_id, source="web"))
        assert not service.is_deletable(booking_row("2024-01-01", "2024-01-03", property_id, source="airbnb"))

    def test_manual_only_policy(self, db, property_id):
        service = BookingService(db, deletable_sources=["manual"])
        assert not service.is_deletable(booking_row("2024-01-01", "2024-01-03", property_id, source="web"))


class TestCreateBooking:
    def test_creates_when_range_is_free(self, db, service, property_id, client_id):
        neighbour = booking_row("2024-01-10", "2024-01-15", property_id)
        db.execute.side_effect = [make_result(), make_result(scalars=[neighbour])]
        data = BookingCreate(start_date="2024-01-15", end_date="2024-01-20", guest_name="Ana")

        booking = asyncio.run(service.create_booking(property_id, client_id, data, user_id=uuid4()))

        assert isinstance(booking, Booking)
        assert booking.start_date == d("2024-01-15")
        assert booking.end_date == d("2024-01-20")
        assert booking.source == "manual"
        assert booking.guest_name == "Ana"
        assert booking.id is not None
        db.commit.assert_awaited_once()
        db.rollback.assert_not_awaited()

        [entry] = added(db, AuditLog)
        assert entry.action == AuditAction.BOOKING_CREATED
        assert entry.resource_id == booking.id
        assert entry.details["start_date"] == "2024-01-15"

    def test_locks_property_row_first(self, db, service, property_id, client_id):
        db.execute.side_effect = [make_result(), make_result()]
        data = BookingCreate(start_date="2024-01-15", end_date="2024-01-20")

        asyncio.run(service.create_booking(property_id, client_id, data))

        lock_stmt = db.execute.await_args_list[0].args[0]
        sql = str(lock_stmt.compile(dialect=postgresql.dialect()))
        assert "FOR UPDATE" in sql
        assert "properties" in sql

    def test_overlap_fails_fast(self, db, service, property_id, client_id):
        existing = booking_row("2024-01-10", "2024-01-15", property_id, source="airbnb")
        db.execute.side_effect = [make_result(), make_result(scalars=[existing])]
        data = BookingCreate(start_date="2024-01-12", end_date="2024-01-14")

        with pytest.raises(ConflictError) as exc_info:
            asyncio.run(service.create_booking(property_id, client_id, data))

        assert exc_info.value.conflicting_interval_id == existing.id
        db.rollback.assert_awaited_once()
        db.add.assert_not_called()
        db.commit.assert_not_awaited()

    def test_exclusion_constraint_becomes_conflict(self, db, service, property_id, client_id):
        racer = booking_row("2024-01-12", "2024-01-18", property_id, source="booking.com")
        db.execute.side_effect = [make_result(), make_result(), make_result(scalars=[racer])]
        db.flush.side_effect = IntegrityError(
            "INSERT INTO bookings ...",
            {},
            Exception('conflicting key value violates exclusion constraint "ex_bookings_no_overlap"'),
        )
        data = BookingCreate(start_date="2024-01-15", end_date="2024-01-20", source=BookingSource.WEB)

        with pytest.raises(ConflictError) as exc_info:
            asyncio.run(service.create_booking(property_id, client_id, data))

        assert exc_info.value.conflicting_interval_id == racer.id
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    def test_constraint_conflict_without_survivor(self, db, service, property_id, client_id):
        db.execute.side_effect = [make_result(), make_result(), make_result()]
        db.flush.side_effect = IntegrityError(
            "INSERT INTO bookings ...", {}, Exception("ex_bookings_no_overlap")
        )
        data = BookingCreate(start_date="2024-01-15", end_date="2024-01-20")

        with pytest.raises(ConflictError) as exc_info:
            asyncio.run(service.create_booking(property_id, client_id, data))

        assert exc_info.value.conflicting_interval_id is None
        assert exc_info.value.to_dict()["conflicting_booking_id"] is None

    def test_other_integrity_errors_propagate(self, db, service, property_id, client_id):
        db.execute.side_effect = [make_result(), make_result()]
        db.flush.side_effect = IntegrityError(
            "INSERT INTO bookings ...", {}, Exception('violates foreign key constraint "bookings_property_id_fkey"')
        )
        data = BookingCreate(start_date="2024-01-15", end_date="2024-01-20")

        with pytest.raises(IntegrityError):
            asyncio.run(service.create_booking(property_id, client_id, data))
        db.rollback.assert_awaited_once()


class TestCheckAvailability:
    def test_returns_clashes(self, db, service, property_id, client_id):
        clash = booking_row("2024-01-10", "2024-01-15", property_id)
        db.execute.return_value = make_result(scalars=[clash])

        conflicts = asyncio.run(
            service.check_availability(property_id, client_id, DateSpan(d("2024-01-14"), d("2024-01-16")))
        )
        assert conflicts == [clash]

    def test_free_range(self, db, service, property_id, client_id):
        db.execute.return_value = make_result(scalars=[booking_row("2024-01-10", "2024-01-15", property_id)])

        conflicts = asyncio.run(
            service.check_availability(property_id, client_id, DateSpan(d("2024-01-15"), d("2024-01-16")))
        )
        assert conflicts == []

    def test_inverted_range(self, db, service, property_id, client_id):
        with pytest.raises(InvalidRangeError):
            asyncio.run(
                service.check_availability(property_id, client_id, DateSpan(d("2024-01-16"), d("2024-01-15")))
            )
        db.execute.assert_not_awaited()

    def test_lists_every_clash_chronologically(self, db, service, property_id, client_id):
        late = booking_row("2024-01-20", "2024-01-25", property_id, source="airbnb")
        early = booking_row("2024-01-08", "2024-01-12", property_id)
        db.execute.return_value = make_result(scalars=[late, early])

        conflicts = asyncio.run(
            service.check_availability(property_id, client_id, DateSpan(d("2024-01-10"), d("2024-01-22")))
        )
        assert conflicts == [early, late]

    @pytest.mark.parametrize(
        "start,end",
        [
            ("2024-01-05", "2024-01-10"),
            ("2024-01-05", "2024-01-11"),
            ("2024-01-12", "2024-01-13"),
            ("2024-01-14", "2024-01-21"),
            ("2024-01-15", "2024-01-20"),
            ("2024-01-25", "2024-01-28"),
        ],
    )
    def test_agrees_with_create_gate(self, db, service, property_id, client_id, start, end):
        existing = [
            booking_row("2024-01-10", "2024-01-15", property_id),
            booking_row("2024-01-20", "2024-01-25", property_id, source="booking.com"),
        ]
        db.execute.return_value = make_result(scalars=existing)
        candidate = DateSpan(d(start), d(end))

        conflicts = asyncio.run(service.check_availability(property_id, client_id, candidate))
        assert (conflicts == []) == (can_create(existing, candidate) is None)


class TestDeleteBooking:
    def test_deletes_and_returns_removed_interval(self, db, service, property_id, client_id):
        booking_id = uuid4()
        row = SimpleNamespace(
            id=booking_id,
            property_id=property_id,
            start_date=d("2024-01-10"),
            end_date=d("2024-01-15"),
            source="manual",
            created_at=datetime(2024, 1, 1),
        )
        db.execute.return_value = make_result(one=row)

        deleted = asyncio.run(service.delete_booking(property_id, client_id, booking_id))

        assert isinstance(deleted, BookingInterval)
        assert deleted.id == booking_id
        assert deleted.nights == 5
        db.commit.assert_awaited_once()
        [entry] = added(db, AuditLog)
        assert entry.action == AuditAction.BOOKING_DELETED

    def test_delete_statement_is_scoped(self, db, service, property_id, client_id):
        db.execute.return_value = make_result(one=SimpleNamespace(
            id=uuid4(),
            property_id=property_id,
            start_date=d("2024-01-10"),
            end_date=d("2024-01-15"),
            source="web",
            created_at=None,
        ))

        asyncio.run(service.delete_booking(property_id, client_id, uuid4()))

        stmt = db.execute.await_args_list[0].args[0]
        sql = str(stmt.compile(dialect=postgresql.dialect()))
        assert sql.startswith("DELETE FROM bookings")
        assert "bookings.property_id" in sql
        assert "bookings.client_id" in sql
        assert "bookings.source IN" in sql
        assert "RETURNING" in sql

    def test_unknown_booking(self, db, service, property_id, client_id):
        db.execute.side_effect = [make_result(one=None), make_result(scalar=None)]

        with pytest.raises(NotFoundError):
            asyncio.run(service.delete_booking(property_id, client_id, uuid4()))
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    def test_synced_booking_is_read_only(self, db, service, property_id, client_id):
        booking_id = uuid4()
        db.execute.side_effect = [make_result(one=None), make_result(scalar="airbnb")]

        with pytest.raises(DeletionNotAllowedError) as exc_info:
            asyncio.run(service.delete_booking(property_id, client_id, booking_id))

        assert exc_info.value.source == "airbnb"
        assert exc_info.value.to_dict()["code"] == "deletion_not_allowed"
        db.commit.assert_not_awaited()
