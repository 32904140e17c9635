"""
Availability Engine

This is the piece that prevents double bookings of the photobooth.
All slot checks go through ``AvailabilityEngine.is_available``.

Conflict rule (half-open intervals):
    [s1, e1) and [s2, e2) conflict iff s1 < e2 AND e1 > s2

Back-to-back bookings (e1 == s2) are legal. Cancelled bookings never block.
When a package is given, only unassigned bookings and bookings for the same
package compete for the slot (one booth per package).

Stored entries that cannot be read are skipped by default, which favors
availability over safety. ``strict=True`` treats any unreadable entry as a
conflict instead.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Iterable, List

from shared.domain.value_objects import TimeRange, round_half_up
from apps.bookings.domain.entities import Booking
from apps.bookings.domain.exceptions import InvalidInput
from apps.bookings.domain.normalizer import normalize_one

logger = logging.getLogger(__name__)


def intervals_conflict(first: TimeRange, second: TimeRange) -> bool:
    """Symmetric overlap test for two half-open ranges"""
    return first.overlaps_with(second)


def candidate_range(candidate_start: Any, duration_minutes: Any) -> TimeRange:
    """
    Build the candidate slot, rejecting impossible input.

    Raises:
        InvalidInput: If the start is not a datetime or the duration is not
            a positive number of minutes
    """
    if not isinstance(candidate_start, datetime):
        raise InvalidInput("candidate start must be a datetime")
    if (
        isinstance(duration_minutes, bool)
        or not isinstance(duration_minutes, (int, float, Decimal))
        or not math.isfinite(duration_minutes)
    ):
        raise InvalidInput("durationMinutes must be a positive number")
    if duration_minutes <= 0:
        raise InvalidInput("durationMinutes must be a positive number")

    try:
        minutes = round_half_up(duration_minutes)
        if minutes <= 0:
            raise InvalidInput("durationMinutes must be at least one minute once rounded")
        return TimeRange.from_duration(candidate_start, minutes)
    except ArithmeticError as e:
        raise InvalidInput(f"durationMinutes is out of range: {duration_minutes!r}") from e


class AvailabilityEngine:
    """
    Checks candidate slots against the stored bookings.

    ``load_entries`` returns the raw stored entries; each one is normalized
    on its own so a single corrupt record only affects itself.

    Usage:
        engine = AvailabilityEngine(repository.load_raw)
        if engine.is_available(start, 60, package_id='classic'):
            ...
    """

    def __init__(self, load_entries: Callable[[], Iterable[Any]], strict: bool = False):
        self.load_entries = load_entries
        self.strict = strict

    def _stored_bookings(self):
        """Yield bookings, or None for entries that cannot be read"""
        for index, entry in enumerate(self.load_entries()):
            try:
                yield normalize_one(entry)
            except Exception as e:
                logger.warning(f"Unreadable stored booking at index {index} during availability check: {e}")
                yield None

    def _iter_conflicts(self, slot: TimeRange, package_id: str | None, exclude_id: str | None):
        for booking in self._stored_bookings():
            if booking is None:
                if self.strict:
                    yield None
                continue
            if exclude_id is not None and booking.id == exclude_id:
                continue
            if not booking.blocks_slot():
                continue
            if not booking.constrains(package_id):
                continue
            if intervals_conflict(slot, booking.slot):
                yield booking

    def is_available(
        self,
        candidate_start: datetime,
        duration_minutes,
        package_id: str | None = None,
        *,
        exclude_id: str | None = None,
    ) -> bool:
        """
        Return True if no stored booking conflicts with the candidate slot.

        Stops at the first conflict.

        Raises:
            InvalidInput: If duration_minutes is not positive
        """
        slot = candidate_range(candidate_start, duration_minutes)
        return self.is_range_available(slot, package_id, exclude_id=exclude_id)

    def is_range_available(
        self,
        slot: TimeRange,
        package_id: str | None = None,
        *,
        exclude_id: str | None = None,
    ) -> bool:
        """Exact-interval check, no rounding of the slot bounds"""
        for conflict in self._iter_conflicts(slot, package_id, exclude_id):
            if conflict is None:
                logger.info(f"Slot {slot} treated as unavailable: unreadable stored booking (strict mode)")
            else:
                logger.debug(f"Slot {slot} conflicts with booking {conflict.id}")
            return False
        return True

    def find_conflicts(
        self,
        candidate_start: datetime,
        duration_minutes,
        package_id: str | None = None,
    ) -> List[Booking]:
        """All readable bookings that conflict with the candidate slot"""
        slot = candidate_range(candidate_start, duration_minutes)
        return [b for b in self._iter_conflicts(slot, package_id, None) if b is not None]
