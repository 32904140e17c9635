"""
Domain building blocks shared by the booking and package contexts.

- Entity: identified by ``id``, carries created/updated instants
- ValueObject: frozen, compared field by field
- Aggregate: an entity that queues domain events until a unit of work
  hands them to the message bus
- DomainEvent: immutable record of a state change, serializable to a dict
"""

from abc import ABC
from dataclasses import dataclass, field
from datetime import datetime
from typing import List
from uuid import uuid4

from django.utils import timezone


def generate_id() -> str:
    """Random hex id for entities and events that bring none of their own."""
    return uuid4().hex


@dataclass(kw_only=True)
class Entity(ABC):
    """
    Identity-bearing domain object.

    Equality and hashing look at ``id`` only, so a booking re-read from the
    store equals the in-memory instance it was saved from.
    """
    id: str = field(default_factory=generate_id)
    created_at: datetime = field(default_factory=timezone.now)
    updated_at: datetime = field(default_factory=timezone.now)

    def __eq__(self, other):
        if not isinstance(other, self.__class__):
            return False
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)


@dataclass(frozen=True)
class ValueObject(ABC):
    """Frozen dataclass base: no identity, equal when all fields are equal."""
    pass


@dataclass(kw_only=True, eq=False)
class Aggregate(Entity):
    """
    Root of a consistency boundary.

    Methods that change state queue events with ``add_event``; the unit of
    work drains them with ``events`` / ``clear_events`` once the write went
    through.
    """
    _events: List['DomainEvent'] = field(default_factory=list, repr=False, init=False, compare=False)

    def add_event(self, event: 'DomainEvent'):
        self._events.append(event)

    def clear_events(self):
        self._events.clear()

    @property
    def events(self) -> List['DomainEvent']:
        """Snapshot of the queued events"""
        return list(self._events)


@dataclass(kw_only=True)
class DomainEvent:
    """
    Something that already happened to an aggregate.

    Subclasses add their payload fields and extend ``to_dict``.
    """
    event_id: str = field(default_factory=generate_id)
    occurred_at: datetime = field(default_factory=timezone.now)
    aggregate_id: str | None = None

    def to_dict(self) -> dict:
        return {
            'event_id': self.event_id,
            'event_type': type(self).__name__,
            'occurred_at': self.occurred_at.isoformat(),
            'aggregate_id': self.aggregate_id,
        }
