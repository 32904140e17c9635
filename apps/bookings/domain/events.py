"""
Booking Domain Events

Events that represent things that have happened in the booking domain.
They are published by the unit of work after the collection is written.
"""

from dataclasses import dataclass

from shared.domain.base import DomainEvent
from shared.domain.value_objects import TimeRange


@dataclass(kw_only=True)
class BookingCreated(DomainEvent):
    """
    Event: A new booking request was stored

    Triggers:
    - Notify the administrator about the request
    - Send an acknowledgement to the customer
    """
    booking_id: str
    slot: TimeRange
    package_id: str | None
    status: str

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'booking_id': self.booking_id,
            'start': self.slot.start.isoformat(),
            'end': self.slot.end.isoformat(),
            'package_id': self.package_id,
            'status': self.status,
        })
        return data


@dataclass(kw_only=True)
class BookingStatusChanged(DomainEvent):
    """
    Event: A status was assigned to a booking

    Emitted for every assignment, including re-assigning the current
    status, so ``old_status`` may equal ``new_status``.
    """
    booking_id: str
    old_status: str
    new_status: str
    reason: str | None = None

    @property
    def is_noop(self) -> bool:
        return self.old_status == self.new_status

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update({
            'booking_id': self.booking_id,
            'old_status': self.old_status,
            'new_status': self.new_status,
            'reason': self.reason,
        })
        return data
