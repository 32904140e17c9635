"""
Booking Repository

Persists the whole booking collection as one JSON array under a single
record-store key.

Every mutation re-reads the entire collection, replaces or appends one
entry, and writes the entire collection back. There is no locking or
versioning, so two writers sharing a store can clobber each other's
unrelated changes (last write wins at collection granularity). Entries that
cannot be normalized are dropped from the collection on the next write.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, List

from django.conf import settings

from shared.infrastructure.record_store import AbstractRecordStore
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.domain.exceptions import BookingNotFound
from apps.bookings.domain.normalizer import normalize_all, to_raw

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = 'pb_bookings_v1'
SORTABLE_FIELDS = ('start', 'created_at', 'updated_at')


@dataclass
class BookingFilter:
    """
    Filter for listing bookings

    date_from keeps bookings ending after it, date_to keeps bookings
    starting before it. page is 1-based and only used with limit.
    """
    date_from: datetime | None = None
    date_to: datetime | None = None
    statuses: Iterable[BookingStatus | str] = field(default_factory=tuple)
    package_id: str | None = None
    search: str | None = None
    sort_by: str = 'start'
    sort_dir: str = 'asc'
    limit: int | None = None
    page: int = 1

    def matches(self, booking: Booking) -> bool:
        if self.date_from is not None and not booking.end > self.date_from:
            return False
        if self.date_to is not None and not booking.start < self.date_to:
            return False
        statuses = {BookingStatus.coerce(s) for s in self.statuses}
        if statuses and booking.status not in statuses:
            return False
        if self.package_id and booking.package_id != self.package_id:
            return False
        query = (self.search or '').strip().lower()
        if query and not self._matches_search(booking, query):
            return False
        return True

    @staticmethod
    def _matches_search(booking: Booking, query: str) -> bool:
        customer = booking.customer or {}
        for key in ('name', 'email', 'phone'):
            value = customer.get(key)
            if isinstance(value, str) and query in value.lower():
                return True
        return query in booking.id.lower()


class BookingRepository:
    """
    Repository for the booking collection

    Usage:
        repo = BookingRepository(DjangoCacheRecordStore())
        booking = repo.get(booking_id)
        booking.apply_status(BookingStatus.CONFIRMED)
        repo.save(booking)
    """

    def __init__(self, store: AbstractRecordStore, key: str | None = None):
        self.store = store
        self.key = key or getattr(settings, 'BOOKINGS_STORAGE_KEY', DEFAULT_STORAGE_KEY)

    def load_raw(self) -> List[Any]:
        """
        Raw stored entries.

        A missing key, corrupt JSON or a non-list payload all read as an
        empty collection.
        """
        payload = self.store.get(self.key)
        if not payload:
            return []
        try:
            data = json.loads(payload)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to parse bookings stored under {self.key!r}: {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f"Bookings stored under {self.key!r} are not a list, ignoring")
            return []
        return data

    def all(self) -> List[Booking]:
        return normalize_all(self.load_raw())

    def get(self, booking_id: str) -> Booking | None:
        if not booking_id:
            return None
        return next((b for b in self.all() if b.id == booking_id), None)

    def add(self, booking: Booking) -> None:
        bookings = self.all()
        bookings.append(booking)
        self._write(bookings)
        logger.info(f"Stored new booking {booking.id}")

    def save(self, booking: Booking) -> None:
        """
        Replace the stored booking with the same id

        Raises:
            BookingNotFound: If no stored booking has this id
        """
        bookings = self.all()
        for index, stored in enumerate(bookings):
            if stored.id == booking.id:
                bookings[index] = booking
                break
        else:
            raise BookingNotFound(booking.id)
        self._write(bookings)
        logger.debug(f"Saved booking {booking.id}")

    def list(self, booking_filter: BookingFilter | None = None) -> List[Booking]:
        booking_filter = booking_filter or BookingFilter()
        results = [b for b in self.all() if booking_filter.matches(b)]

        sort_by = booking_filter.sort_by if booking_filter.sort_by in SORTABLE_FIELDS else 'start'
        descending = booking_filter.sort_dir == 'desc'
        results.sort(key=lambda b: getattr(b, sort_by), reverse=descending)

        if booking_filter.limit is not None:
            limit = max(1, int(booking_filter.limit))
            page = max(1, int(booking_filter.page or 1))
            offset = (page - 1) * limit
            results = results[offset:offset + limit]
        return results

    def _write(self, bookings: List[Booking]) -> None:
        self.store.set(self.key, json.dumps([to_raw(b) for b in bookings]))
