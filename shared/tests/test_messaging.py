from dataclasses import dataclass

import pytest
from django.core.cache import caches

from shared.application.message_bus import MessageBus
from shared.application.uow import RecordStoreUnitOfWork
from shared.domain.base import Aggregate, DomainEvent
from shared.infrastructure.record_store import DjangoCacheRecordStore, InMemoryRecordStore


@dataclass(kw_only=True)
class SomethingHappened(DomainEvent):
    detail: str = ""


@dataclass(kw_only=True, eq=False)
class Thing(Aggregate):
    pass


class TestMessageBus:
    def test_all_handlers_receive_the_event(self, bus):
        first, second = [], []
        bus.register_event_handler(SomethingHappened, first.append)
        bus.register_event_handler(SomethingHappened, second.append)

        event = SomethingHappened(detail="x")
        bus.publish_events([event])

        assert first == [event]
        assert second == [event]

    def test_failing_handler_does_not_stop_the_others(self, bus, caplog):
        received = []

        def broken(event):
            raise RuntimeError("mail server down")

        bus.register_event_handler(SomethingHappened, broken)
        bus.register_event_handler(SomethingHappened, received.append)

        with caplog.at_level("ERROR", logger="shared.application.message_bus"):
            bus.publish_events([SomethingHappened()])

        assert len(received) == 1
        assert "mail server down" in caplog.text

    def test_unregister(self, bus):
        received = []
        bus.register_event_handler(SomethingHappened, received.append)
        bus.unregister_event_handler(SomethingHappened, received.append)

        bus.publish_events([SomethingHappened()])

        assert received == []
        assert bus.handlers_for(SomethingHappened) == []


class TestUnitOfWork:
    def test_events_are_published_on_success(self, bus):
        received = []
        bus.register_event_handler(SomethingHappened, received.append)
        thing = Thing()
        thing.add_event(SomethingHappened(aggregate_id=thing.id))

        with RecordStoreUnitOfWork(bus) as uow:
            uow.collect_events(thing)
            assert received == []

        assert [e.aggregate_id for e in received] == [thing.id]
        assert thing.events == []

    def test_events_are_discarded_on_error(self, bus):
        received = []
        bus.register_event_handler(SomethingHappened, received.append)
        thing = Thing()
        thing.add_event(SomethingHappened())

        with pytest.raises(RuntimeError):
            with RecordStoreUnitOfWork(bus) as uow:
                uow.collect_events(thing)
                raise RuntimeError("write failed")

        assert received == []


class TestRecordStores:
    def test_in_memory_store(self):
        store = InMemoryRecordStore({"a": "1"})
        store.set("b", "2")

        assert store.get("a") == "1"
        assert store.get("b") == "2"
        assert store.get("c") is None

    def test_django_cache_store(self):
        store = DjangoCacheRecordStore()
        store.set("pb_test", "[]")

        assert store.get("pb_test") == "[]"
        assert caches["default"].get("pb_test") == "[]"
        assert store.get("missing") is None

    def test_django_cache_store_ignores_foreign_values(self):
        caches["default"].set("pb_test", {"not": "a string"})

        assert DjangoCacheRecordStore().get("pb_test") is None

    def test_cache_alias_from_settings(self, settings):
        settings.BOOKINGS_CACHE_ALIAS = "bookings"

        assert DjangoCacheRecordStore().alias == "bookings"
        assert DjangoCacheRecordStore("default").alias == "default"
