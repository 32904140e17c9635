"""
Booking Command Handlers

These are the use cases for the booking domain.
They orchestrate domain operations inside a unit of work.

Commands:
- CreateBookingCommand: Store a new booking for a free slot
- ApplyStatusCommand: Assign a status and extend the audit trail
- SubmitDraftCommand: Validate a form draft and turn it into a booking
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, List

from django.conf import settings

from shared.application.message_bus import MessageBus
from shared.application.uow import RecordStoreUnitOfWork
from shared.domain.instants import parse_instant
from shared.domain.value_objects import TimeRange
from apps.bookings.domain.availability import AvailabilityEngine
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.exceptions import (
    BookingConflictError,
    BookingNotFound,
    InvalidInput,
)
from apps.bookings.domain.validators import draft_name, draft_start, validate
from apps.bookings.infrastructure.repositories import BookingRepository

logger = logging.getLogger(__name__)


# ===== Commands =====

@dataclass
class CreateBookingCommand:
    """
    Command to create a new booking

    At least one of start or end is required. When only one is given the
    other is derived from duration_minutes (default from settings).
    """
    start: datetime | str | None = None
    end: datetime | str | None = None
    duration_minutes: int | None = None
    package_id: str | None = None
    customer: dict | None = None
    status: BookingStatus | str | None = None
    status_reason: str | None = None
    price: Decimal | None = None
    notes: str | None = None
    check_availability: bool = True

    @classmethod
    def from_draft(cls, draft: Mapping) -> 'CreateBookingCommand':
        """Translate a validated form draft into a command"""
        duration = draft.get('durationMinutes')
        if duration is None:
            duration = draft.get('duration')
        guests = draft.get('guests')
        if guests is None:
            guests = draft.get('guestCount')
        package_id = draft.get('packageId') or draft.get('packageName')
        venue = draft.get('venue') or draft.get('address')
        notes = draft.get('notes')

        customer = {
            'name': draft_name(draft),
            'email': str(draft.get('email') or '').strip(),
            'phone': str(draft.get('phone') or '').strip(),
        }
        if guests not in (None, ''):
            customer['guests'] = int(guests)
        if isinstance(venue, str) and venue.strip():
            customer['venue'] = venue.strip()

        return cls(
            start=draft_start(draft),
            duration_minutes=int(duration) if duration not in (None, '') else None,
            package_id=package_id.strip() if isinstance(package_id, str) and package_id.strip() else None,
            customer=customer,
            notes=notes if isinstance(notes, str) and notes else None,
        )


@dataclass
class ApplyStatusCommand:
    """Command to assign a status to a booking"""
    booking_id: str
    status: BookingStatus | str
    reason: str | None = None


@dataclass
class SubmitDraftCommand:
    """Command carrying a raw booking form draft"""
    draft: Mapping


@dataclass
class SubmissionResult:
    """Outcome of a draft submission: a booking or the validation messages"""
    booking: Booking | None = None
    errors: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.booking is not None and not self.errors


# ===== Command Handlers =====

def _instant(value: Any, label: str) -> datetime:
    parsed = parse_instant(value)
    if parsed is None:
        raise InvalidInput(f"Invalid {label} date")
    return parsed


def _default_duration(command: CreateBookingCommand) -> int:
    minutes = command.duration_minutes
    if isinstance(minutes, (int, float)) and not isinstance(minutes, bool) and minutes > 0:
        return minutes
    return getattr(settings, 'BOOKINGS_DEFAULT_DURATION_MINUTES', 30)


class CreateBookingHandler:
    """
    Handler for CreateBooking command

    1. Resolve the slot from start/end/duration
    2. Check the slot against stored bookings (unless disabled)
    3. Build the Booking aggregate
    4. Re-read, append and write back the whole collection
    5. Publish BookingCreated
    """

    def __init__(self, booking_repo: BookingRepository, bus: MessageBus | None = None, strict: bool | None = None):
        self.booking_repo = booking_repo
        self.bus = bus
        if strict is None:
            strict = getattr(settings, 'BOOKINGS_STRICT_AVAILABILITY', False)
        self.availability = AvailabilityEngine(booking_repo.load_raw, strict=strict)

    def resolve_slot(self, command: CreateBookingCommand) -> tuple[datetime, datetime]:
        """
        Raises:
            InvalidInput: If neither start nor end is given, a date cannot
                be parsed, or end is not after start
        """
        if command.start in (None, '') and command.end in (None, ''):
            raise InvalidInput("start or end must be provided")

        try:
            if command.start not in (None, ''):
                start = _instant(command.start, 'start')
                if command.end not in (None, ''):
                    end = _instant(command.end, 'end')
                else:
                    end = start + timedelta(minutes=_default_duration(command))
            else:
                end = _instant(command.end, 'end')
                start = end - timedelta(minutes=_default_duration(command))
        except ArithmeticError as e:
            raise InvalidInput(f"durationMinutes is out of range: {command.duration_minutes!r}") from e

        if end <= start:
            raise InvalidInput("end must be after start")
        return start, end

    def handle(self, command: CreateBookingCommand) -> Booking:
        """
        Returns: Created Booking aggregate

        Raises:
            InvalidInput: If the slot cannot be resolved
            BookingConflictError: If the slot is already taken
        """
        start, end = self.resolve_slot(command)
        slot = TimeRange(start, end)

        if command.check_availability and not self.availability.is_range_available(slot, command.package_id):
            raise BookingConflictError(
                f"Slot {start.isoformat()} - {end.isoformat()} is not available"
                + (f" for package {command.package_id}" if command.package_id else "")
            )

        status = BookingStatus.coerce(command.status, default=BookingStatus.BOOKED)

        with RecordStoreUnitOfWork(self.bus) as uow:
            booking = Booking.create(
                start,
                end,
                package_id=command.package_id if isinstance(command.package_id, str) else None,
                customer=dict(command.customer) if isinstance(command.customer, Mapping) else None,
                status=status,
                status_reason=command.status_reason if isinstance(command.status_reason, str) else None,
                price=command.price,
                notes=command.notes if isinstance(command.notes, str) else None,
            )
            self.booking_repo.add(booking)
            uow.collect_events(booking)

        logger.info(f"Booking created: {booking.id} ({start.isoformat()} - {end.isoformat()})")
        return booking


class ApplyStatusHandler:
    """
    Status Lifecycle Manager

    Any status may follow any other. Every call, including re-assigning the
    current status, appends one history entry and refreshes updated_at.
    The collection is re-read before the change and written back whole.
    """

    def __init__(self, booking_repo: BookingRepository, bus: MessageBus | None = None):
        self.booking_repo = booking_repo
        self.bus = bus

    def handle(self, command: ApplyStatusCommand) -> Booking:
        """
        Returns: The updated booking

        Raises:
            InvalidInput: If the id is empty or the status is unknown
            BookingNotFound: If no stored booking has this id
        """
        if not command.booking_id:
            raise InvalidInput("booking id is required")
        new_status = BookingStatus.coerce(command.status)
        if new_status is None:
            raise InvalidInput(f"Invalid status: {command.status!r}")

        with RecordStoreUnitOfWork(self.bus) as uow:
            booking = self.booking_repo.get(command.booking_id)
            if booking is None:
                raise BookingNotFound(command.booking_id)

            old_status = booking.status
            booking.apply_status(new_status, command.reason)
            self.booking_repo.save(booking)
            uow.collect_events(booking)

        logger.info(
            f"Booking {booking.id} status {old_status.value} -> {new_status.value}"
            + (f" ({command.reason})" if command.reason else "")
        )
        return booking


class SubmitDraftHandler:
    """
    Handler for a booking form submission

    Validation problems are returned, not raised, so the form can show all
    of them at once. A taken slot is reported the same way.
    """

    def __init__(self, booking_repo: BookingRepository, bus: MessageBus | None = None):
        self.create_handler = CreateBookingHandler(booking_repo, bus)

    def handle(self, command: SubmitDraftCommand) -> SubmissionResult:
        errors = validate(command.draft)
        if errors:
            logger.info(f"Booking draft rejected with {len(errors)} validation error(s)")
            return SubmissionResult(errors=errors)

        try:
            booking = self.create_handler.handle(CreateBookingCommand.from_draft(command.draft))
        except BookingConflictError:
            return SubmissionResult(errors=['The selected time slot is no longer available.'])
        return SubmissionResult(booking=booking)
