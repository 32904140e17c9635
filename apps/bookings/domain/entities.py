"""
Booking Domain Entities

Core business entities for the booking domain:
- Booking: Main aggregate representing a photobooth reservation
- BookingStatus: Closed set of lifecycle states
- StatusChange: One entry of the append-only status audit trail
"""

import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List

from django.utils import timezone

from shared.domain.base import Aggregate, ValueObject
from shared.domain.value_objects import TimeRange
from apps.bookings.domain.events import BookingCreated, BookingStatusChanged


class BookingStatus(str, Enum):
    """
    Booking lifecycle states

    No transition graph is enforced: any status may be assigned from any
    other, including the current one. Every assignment is recorded in the
    booking's status history.
    """
    DRAFT = 'draft'
    BOOKED = 'booked'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'

    @classmethod
    def values(cls) -> frozenset:
        return frozenset(member.value for member in cls)

    @classmethod
    def coerce(cls, value: Any, default: 'BookingStatus | None' = None) -> 'BookingStatus | None':
        """Map a loosely typed value onto the closed set, or return ``default``"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value in cls.values():
            return cls(value)
        return default


def generate_booking_id() -> str:
    """
    Session-unique booking id: millisecond timestamp plus a random suffix.

    Uniqueness is best effort, collisions are not cryptographically ruled out.
    """
    return f"b_{int(time.time() * 1000):x}{secrets.token_hex(4)}"


@dataclass(frozen=True)
class StatusChange(ValueObject):
    """A single status assignment in the audit trail"""
    status: BookingStatus
    at: datetime
    reason: str | None = None


@dataclass(kw_only=True, eq=False)
class Booking(Aggregate):
    """
    Booking Aggregate Root

    Represents a customer's reservation of the photobooth for a time slot.

    Key invariants:
    - end > start
    - status_history is non-empty and its last entry matches status
    - status_history timestamps are non-decreasing
    - updated_at >= created_at
    """

    id: str = field(default_factory=generate_booking_id)

    start: datetime
    end: datetime
    duration_minutes: int

    package_id: str | None = None
    customer: dict | None = None

    status: BookingStatus = BookingStatus.BOOKED
    status_history: List[StatusChange] = field(default_factory=list)

    # Amount agreed at booking time, independent of live pricing
    price: Decimal | None = None
    notes: str | None = None

    @classmethod
    def create(
        cls,
        start: datetime,
        end: datetime,
        *,
        package_id: str | None = None,
        customer: dict | None = None,
        status: BookingStatus = BookingStatus.BOOKED,
        status_reason: str | None = None,
        price: Decimal | None = None,
        notes: str | None = None,
    ) -> 'Booking':
        """
        Build a brand-new booking with a single-entry history.

        Events: BookingCreated
        """
        slot = TimeRange(start, end)
        now = timezone.now()
        booking = cls(
            created_at=now,
            updated_at=now,
            start=slot.start,
            end=slot.end,
            duration_minutes=max(1, slot.duration_minutes),
            package_id=package_id,
            customer=customer,
            status=status,
            status_history=[StatusChange(status, now, status_reason)],
            price=price,
            notes=notes,
        )

        booking.add_event(BookingCreated(
            aggregate_id=booking.id,
            booking_id=booking.id,
            slot=slot,
            package_id=package_id,
            status=status.value,
        ))
        return booking

    def apply_status(
        self,
        new_status: BookingStatus,
        reason: str | None = None,
        at: datetime | None = None,
    ) -> StatusChange:
        """
        Assign a status and append it to the audit trail.

        Re-assigning the current status still appends an entry and refreshes
        updated_at, so the history records every attempt.
        Events: BookingStatusChanged
        """
        at = at or timezone.now()
        if self.status_history and at < self.status_history[-1].at:
            at = self.status_history[-1].at

        old_status = self.status
        entry = StatusChange(new_status, at, reason)
        self.status_history.append(entry)
        self.status = new_status
        self.updated_at = max(at, self.created_at)

        self.add_event(BookingStatusChanged(
            aggregate_id=self.id,
            booking_id=self.id,
            old_status=old_status.value,
            new_status=new_status.value,
            reason=reason,
        ))
        return entry

    @property
    def slot(self) -> TimeRange:
        return TimeRange(self.start, self.end)

    def blocks_slot(self) -> bool:
        """Every status except cancelled keeps the slot occupied"""
        return self.status != BookingStatus.CANCELLED

    def constrains(self, package_id: str | None) -> bool:
        """
        Whether this booking competes for the same resource.

        Unassigned bookings constrain every package; assigned bookings only
        constrain their own package.
        """
        if package_id is None or self.package_id is None:
            return True
        return self.package_id == package_id

    def __str__(self):
        return f"Booking {self.id} ({self.status.value})"

    def __repr__(self):
        return (
            f"Booking(id={self.id}, status={self.status.value}, "
            f"slot={self.slot!r})"
        )
