"""Booking services wired to the configured record store.

Module-level entry points for callers that do not want to assemble
repositories and handlers themselves. Every call builds its collaborators
fresh, so each operation re-reads the stored collection.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping

from django.conf import settings

from shared.application.message_bus import MessageBus
from shared.infrastructure.record_store import AbstractRecordStore, DjangoCacheRecordStore
from apps.bookings.application.command_handlers import (
    ApplyStatusCommand,
    ApplyStatusHandler,
    CreateBookingCommand,
    CreateBookingHandler,
    SubmissionResult,
    SubmitDraftCommand,
    SubmitDraftHandler,
)
from apps.bookings.domain.availability import AvailabilityEngine
from apps.bookings.domain.entities import Booking, BookingStatus
from apps.bookings.infrastructure.repositories import BookingFilter, BookingRepository


def get_booking_repository(store: AbstractRecordStore | None = None) -> BookingRepository:
    """Repository over ``store``, or over the configured Django cache"""
    return BookingRepository(store if store is not None else DjangoCacheRecordStore())


def is_available(
    candidate_start: datetime,
    duration_minutes,
    package_id: str | None = None,
    *,
    store: AbstractRecordStore | None = None,
) -> bool:
    """True if [start, start + duration) conflicts with no stored booking."""
    repo = get_booking_repository(store)
    strict = getattr(settings, 'BOOKINGS_STRICT_AVAILABILITY', False)
    return AvailabilityEngine(repo.load_raw, strict=strict).is_available(
        candidate_start, duration_minutes, package_id
    )


def create_booking(
    command: CreateBookingCommand,
    *,
    store: AbstractRecordStore | None = None,
    bus: MessageBus | None = None,
) -> Booking:
    return CreateBookingHandler(get_booking_repository(store), bus).handle(command)


def submit_draft(
    draft: Mapping[str, Any],
    *,
    store: AbstractRecordStore | None = None,
    bus: MessageBus | None = None,
) -> SubmissionResult:
    return SubmitDraftHandler(get_booking_repository(store), bus).handle(SubmitDraftCommand(draft))


def apply_status(
    booking_id: str,
    new_status: BookingStatus | str,
    reason: str | None = None,
    *,
    store: AbstractRecordStore | None = None,
    bus: MessageBus | None = None,
) -> Booking:
    command = ApplyStatusCommand(booking_id=booking_id, status=new_status, reason=reason)
    return ApplyStatusHandler(get_booking_repository(store), bus).handle(command)


def get_booking(booking_id: str, *, store: AbstractRecordStore | None = None) -> Booking | None:
    return get_booking_repository(store).get(booking_id)


def list_bookings(
    booking_filter: BookingFilter | None = None,
    *,
    store: AbstractRecordStore | None = None,
) -> List[Booking]:
    return get_booking_repository(store).list(booking_filter)
