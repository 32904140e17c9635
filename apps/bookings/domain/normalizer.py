"""
Booking Normalizer

Translates between the persisted JSON shape and the Booking aggregate.

The stored collection is a best-effort cache that other code (or another
browser tab) may have corrupted, so every entry is repaired on its own:
one unreadable entry is dropped and logged, the rest of the batch survives.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, List

from shared.domain.instants import parse_instant, to_iso
from shared.domain.value_objects import round_half_up
from apps.bookings.domain.entities import (
    Booking,
    BookingStatus,
    StatusChange,
    generate_booking_id,
)

logger = logging.getLogger(__name__)


def _finite_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    return math.isfinite(value)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ''


def _normalize_history(raw_history: Any, status: BookingStatus, created_at, updated_at) -> List[StatusChange]:
    history: List[StatusChange] = []
    if isinstance(raw_history, list):
        for raw_entry in raw_history:
            entry = raw_entry if isinstance(raw_entry, Mapping) else {}
            at = parse_instant(entry.get('at')) or created_at
            entry_status = BookingStatus.coerce(entry.get('status'), default=status)
            reason = entry.get('reason')
            history.append(StatusChange(
                entry_status,
                at,
                reason if isinstance(reason, str) else None,
            ))

    if not history:
        return [StatusChange(status, created_at)]

    # Stable sort keeps same-instant entries in their recorded order
    history.sort(key=lambda change: change.at)
    if history[-1].status != status:
        history.append(StatusChange(status, max(updated_at, history[-1].at)))
    return history


def _stored_duration(value: Any) -> int | None:
    """Rounded stored duration, or None when it must be recomputed"""
    if not _finite_number(value) or value <= 0:
        return None
    try:
        minutes = round_half_up(value)
    except ArithmeticError:
        return None
    return minutes if minutes > 0 else None


def normalize_one(entry: Any) -> Booking:
    """
    Repair a single stored entry into a canonical Booking.

    Raises:
        ValueError: If the entry cannot be repaired (not a mapping,
            unparsable start/end, or end not after start)
    """
    if not isinstance(entry, Mapping):
        raise ValueError(f"expected a mapping, got {type(entry).__name__}")

    start = parse_instant(entry.get('start'))
    end = parse_instant(entry.get('end'))
    if start is None or end is None:
        raise ValueError(f"invalid start/end: {entry.get('start')!r} / {entry.get('end')!r}")
    if end <= start:
        raise ValueError(f"end {end.isoformat()} is not after start {start.isoformat()}")

    created_at = parse_instant(entry.get('createdAt')) or start
    updated_at = parse_instant(entry.get('updatedAt')) or created_at
    updated_at = max(updated_at, created_at)

    duration_minutes = _stored_duration(entry.get('durationMinutes'))
    if duration_minutes is None:
        duration_minutes = max(1, round_half_up((end - start).total_seconds() / 60))

    status = BookingStatus.coerce(entry.get('status'), default=BookingStatus.BOOKED)
    history = _normalize_history(entry.get('statusHistory'), status, created_at, updated_at)

    raw_id = entry.get('id')
    raw_package = entry.get('packageId')
    raw_customer = entry.get('customer')
    raw_price = entry.get('price')
    raw_notes = entry.get('notes')

    return Booking(
        id=raw_id if _non_empty_str(raw_id) else generate_booking_id(),
        created_at=created_at,
        updated_at=updated_at,
        start=start,
        end=end,
        duration_minutes=duration_minutes,
        package_id=raw_package if isinstance(raw_package, str) and raw_package else None,
        customer=dict(raw_customer) if isinstance(raw_customer, Mapping) else None,
        status=status,
        status_history=history,
        price=_to_decimal(raw_price),
        notes=raw_notes if isinstance(raw_notes, str) else None,
    )


def _to_decimal(value: Any) -> Decimal | None:
    if not _finite_number(value):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


def normalize_all(raw_list: Any) -> List[Booking]:
    """
    Normalize every entry of a stored collection.

    Anything that is not a list is treated as an empty collection. Entries
    that cannot be repaired are logged and skipped; this never raises for
    the batch.
    """
    if not isinstance(raw_list, Iterable) or isinstance(raw_list, (str, bytes, Mapping)):
        return []

    bookings: List[Booking] = []
    for index, entry in enumerate(raw_list):
        try:
            bookings.append(normalize_one(entry))
        except Exception as e:
            logger.warning(f"Skipping stored booking at index {index}: {e}")
            continue
    return bookings


def to_raw(booking: Booking) -> dict:
    """Serialize a booking into the persisted JSON-compatible shape"""
    return {
        'id': booking.id,
        'createdAt': to_iso(booking.created_at),
        'updatedAt': to_iso(booking.updated_at),
        'start': to_iso(booking.start),
        'end': to_iso(booking.end),
        'durationMinutes': booking.duration_minutes,
        'packageId': booking.package_id,
        'customer': booking.customer,
        'status': booking.status.value,
        'statusHistory': [
            {
                'status': change.status.value,
                'at': to_iso(change.at),
                'reason': change.reason,
            }
            for change in booking.status_history
        ],
        'price': float(booking.price) if booking.price is not None else None,
        'notes': booking.notes,
    }
