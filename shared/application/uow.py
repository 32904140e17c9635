"""
Unit of Work Pattern

Collects domain events raised while a use case runs and publishes them only
if the use case finishes without an exception.

The record store has no transactions: writes made inside the block are not
undone on failure, only the pending events are discarded.
"""

from typing import List
import logging

from shared.application.message_bus import MessageBus
from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


class RecordStoreUnitOfWork:
    """
    Unit of Work for record-store backed repositories

    Usage:
        with RecordStoreUnitOfWork() as uow:
            booking = booking_repo.get(booking_id)
            booking.apply_status(BookingStatus.CONFIRMED)
            booking_repo.save(booking)
            uow.collect_events(booking)
        # Events are published here
    """

    def __init__(self, bus: MessageBus | None = None):
        self._events: List[DomainEvent] = []
        self._bus = bus

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.commit()
        else:
            self.rollback()

    def commit(self):
        """Publish collected events"""
        events = self._events.copy()
        self._events.clear()
        if events:
            self._publish_events(events)

    def rollback(self):
        """Discard collected events"""
        if self._events:
            logger.warning(f"Discarding {len(self._events)} events after failed unit of work")
        self._events.clear()

    def collect_events(self, aggregate):
        """Move pending events from the aggregate into this unit of work"""
        new_events = aggregate.events
        if new_events:
            self._events.extend(new_events)
            aggregate.clear_events()
            logger.debug(
                f"Collected {len(new_events)} events from "
                f"{aggregate.__class__.__name__} (ID: {aggregate.id})"
            )

    def _publish_events(self, events: List[DomainEvent]):
        bus = self._bus
        if bus is None:
            from shared.application.message_bus import message_bus as bus

        logger.debug(f"Publishing {len(events)} domain events")
        bus.publish_events(events)
