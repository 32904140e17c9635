"""Tests for status assignment and the status audit trail."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from apps.bookings.application.command_handlers import (
    ApplyStatusCommand,
    ApplyStatusHandler,
    CreateBookingCommand,
    CreateBookingHandler,
)
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.events import BookingStatusChanged
from apps.bookings.domain.exceptions import BookingNotFound, InvalidInput

START = datetime(2026, 7, 4, 15, tzinfo=timezone.utc)


@pytest.fixture
def booking(booking_repo):
    return CreateBookingHandler(booking_repo).handle(
        CreateBookingCommand(start=START, duration_minutes=120, package_id="classic")
    )


@pytest.fixture
def handler(booking_repo, bus):
    return ApplyStatusHandler(booking_repo, bus)


def test_status_change_is_persisted(handler, booking, booking_repo):
    updated = handler.handle(ApplyStatusCommand(booking.id, BookingStatus.CONFIRMED, "deposit received"))

    stored = booking_repo.get(booking.id)
    assert updated.status is BookingStatus.CONFIRMED
    assert stored.status is BookingStatus.CONFIRMED
    assert stored.status_history[-1].status is BookingStatus.CONFIRMED
    assert stored.status_history[-1].reason == "deposit received"


def test_every_call_appends_exactly_one_entry(handler, booking, booking_repo):
    sequence = ["confirmed", "confirmed", "cancelled", "booked", "completed", "completed"]

    lengths = [len(booking_repo.get(booking.id).status_history)]
    for status in sequence:
        handler.handle(ApplyStatusCommand(booking.id, status))
        stored = booking_repo.get(booking.id)
        lengths.append(len(stored.status_history))
        assert stored.status.value == status
        assert stored.status_history[-1].status is stored.status

    assert lengths == list(range(1, len(sequence) + 2))


def test_history_timestamps_never_decrease(handler, booking, booking_repo):
    for status in ("confirmed", "cancelled", "booked"):
        handler.handle(ApplyStatusCommand(booking.id, status))

    timestamps = [c.at for c in booking_repo.get(booking.id).status_history]
    assert timestamps == sorted(timestamps)


def test_noop_assignment_refreshes_updated_at(handler, booking, booking_repo):
    before = booking_repo.get(booking.id)

    after = handler.handle(ApplyStatusCommand(booking.id, before.status))

    assert after.status is before.status
    assert len(after.status_history) == len(before.status_history) + 1
    assert after.updated_at >= before.updated_at
    assert after.updated_at == after.status_history[-1].at


def test_unknown_booking_raises_not_found(handler, booking):
    with pytest.raises(BookingNotFound) as excinfo:
        handler.handle(ApplyStatusCommand("b_missing", "confirmed"))

    assert excinfo.value.booking_id == "b_missing"


@pytest.mark.parametrize("status", ["approved", "", None, 3])
def test_unknown_status_is_invalid_input(handler, booking, status):
    with pytest.raises(InvalidInput):
        handler.handle(ApplyStatusCommand(booking.id, status))


def test_empty_id_is_invalid_input(handler):
    with pytest.raises(InvalidInput):
        handler.handle(ApplyStatusCommand("", "confirmed"))


def test_not_found_is_distinct_from_invalid_input():
    assert not issubclass(BookingNotFound, InvalidInput)
    assert not issubclass(InvalidInput, BookingNotFound)


def test_status_change_event_is_published(handler, booking, bus):
    received = []
    bus.register_event_handler(BookingStatusChanged, received.append)

    handler.handle(ApplyStatusCommand(booking.id, "booked", "re-sent"))

    [event] = received
    assert event.booking_id == booking.id
    assert event.old_status == "booked"
    assert event.new_status == "booked"
    assert event.is_noop
    assert event.reason == "re-sent"


def test_no_event_when_booking_is_missing(handler, bus):
    received = []
    bus.register_event_handler(BookingStatusChanged, received.append)

    with pytest.raises(BookingNotFound):
        handler.handle(ApplyStatusCommand("b_missing", "confirmed"))

    assert received == []


def test_other_bookings_are_left_untouched(handler, booking, booking_repo):
    other = CreateBookingHandler(booking_repo).handle(
        CreateBookingCommand(start=START + timedelta(days=1), duration_minutes=60)
    )

    handler.handle(ApplyStatusCommand(booking.id, "cancelled"))

    stored_other = booking_repo.get(other.id)
    assert stored_other.status is BookingStatus.BOOKED
    assert len(stored_other.status_history) == 1


def test_apply_status_on_aggregate_keeps_history_monotonic():
    booking = Booking.create(START, START + timedelta(hours=1))
    earlier = booking.status_history[-1].at - timedelta(minutes=5)

    entry = booking.apply_status(BookingStatus.CONFIRMED, at=earlier)

    assert entry.at == booking.status_history[-2].at
    assert booking.updated_at >= booking.created_at
