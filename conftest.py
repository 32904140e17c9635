import pytest
from django.core.cache import caches

from shared.application.message_bus import MessageBus
from shared.infrastructure.record_store import InMemoryRecordStore
from apps.bookings.infrastructure.repositories import BookingRepository


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def booking_repo(store):
    return BookingRepository(store)


@pytest.fixture
def bus():
    return MessageBus()


@pytest.fixture(autouse=True)
def clear_caches():
    yield
    for cache in caches.all():
        cache.clear()
