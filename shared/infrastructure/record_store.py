"""
Record Store

A flat key-value store of strings. This is the only persistence contract the
booking core relies on:

    get(key) -> str | None
    set(key, value) -> None

There are no transactions and no locking. Callers that share a store across
processes get last-write-wins semantics.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict

from django.conf import settings
from django.core.cache import caches

logger = logging.getLogger(__name__)


class AbstractRecordStore(ABC):
    """Abstract key-value store of strings"""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored string or None when the key is absent"""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing what was there"""
        pass


class InMemoryRecordStore(AbstractRecordStore):
    """Process-local store, used by tests and scripts"""

    def __init__(self, initial: Dict[str, str] | None = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class DjangoCacheRecordStore(AbstractRecordStore):
    """
    Record store backed by a Django cache alias

    Entries are stored without expiry. The cache backend decides whether the
    data is shared between processes (Redis, database cache) or not (locmem).
    """

    def __init__(self, alias: str | None = None):
        self.alias = alias or getattr(settings, 'BOOKINGS_CACHE_ALIAS', 'default')

    @property
    def cache(self):
        return caches[self.alias]

    def get(self, key: str) -> str | None:
        value = self.cache.get(key)
        if value is not None and not isinstance(value, str):
            logger.warning(f"Ignoring non-string value cached under {key!r}")
            return None
        return value

    def set(self, key: str, value: str) -> None:
        self.cache.set(key, value, None)
        logger.debug(f"Stored {len(value)} characters under {key!r} in cache {self.alias!r}")
