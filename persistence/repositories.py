from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Mapping

from settings import get_settings

from .disk_store import DurableStore, Record
from .interfaces import AsyncCollection
from .records import ensure_collection

logger = logging.getLogger(__name__)


def _strict_equal(actual: Any, expected: Any) -> bool:
    # bool is a subclass of int in Python; keep true/1 apart the way JSON does.
    if isinstance(actual, bool) or isinstance(expected, bool):
        return isinstance(actual, bool) and isinstance(expected, bool) and actual is expected
    if isinstance(actual, (int, float)) and isinstance(expected, (int, float)):
        return actual == expected
    if isinstance(actual, dict) and isinstance(expected, dict):
        return actual.keys() == expected.keys() and all(_strict_equal(actual[k], expected[k]) for k in actual)
    if isinstance(actual, list) and isinstance(expected, list):
        return len(actual) == len(expected) and all(_strict_equal(a, e) for a, e in zip(actual, expected))
    return type(actual) is type(expected) and actual == expected


def matches_query(record: Mapping[str, Any], query: Mapping[str, Any]) -> bool:
    """Exact-match conjunction: every query field must be present and equal."""
    for key, expected in query.items():
        if key not in record:
            return False
        if not _strict_equal(record[key], expected):
            return False
    return True


class CollectionAccessor(AsyncCollection):
    """
    Mongoose-style model bound to one collection of a DurableStore.

    The store is synchronous; each call runs it via asyncio.to_thread so the
    event loop is not blocked on file I/O. "Not found" comes back as None.
    """

    def __init__(self, store: DurableStore, collection: str) -> None:
        self._store = store
        self._collection = ensure_collection(collection)

    @property
    def collection_name(self) -> str:
        return self._collection

    @property
    def store(self) -> DurableStore:
        return self._store

    async def find(self, query: Mapping[str, Any] | None = None) -> list[Record]:
        items = await asyncio.to_thread(self._store.find_all, self._collection)
        if not query:
            return items
        return [item for item in items if matches_query(item, query)]

    async def find_by_id(self, record_id: str) -> Record | None:
        return await asyncio.to_thread(self._store.find_by_id, self._collection, record_id)

    async def find_one(self, query: Mapping[str, Any] | None = None) -> Record | None:
        items = await asyncio.to_thread(self._store.find_all, self._collection)
        for item in items:
            if not query or matches_query(item, query):
                return item
        return None

    async def count_documents(self, query: Mapping[str, Any] | None = None) -> int:
        if not query:
            return await asyncio.to_thread(self._store.count, self._collection)
        return len(await self.find(query))

    async def create(self, data: Mapping[str, Any]) -> Record:
        return await asyncio.to_thread(self._store.create, self._collection, data)

    async def find_by_id_and_update(self, record_id: str, updates: Mapping[str, Any]) -> Record | None:
        return await asyncio.to_thread(self._store.update, self._collection, record_id, updates)

    async def find_by_id_and_delete(self, record_id: str) -> dict[str, str] | None:
        deleted = await asyncio.to_thread(self._store.delete, self._collection, record_id)
        return {"_id": record_id} if deleted else None


_DEFAULT_STORE: DurableStore | None = None
_DEFAULT_STORE_GUARD = threading.Lock()


def get_default_store() -> DurableStore:
    """Process-wide store built lazily from settings."""
    global _DEFAULT_STORE
    with _DEFAULT_STORE_GUARD:
        if _DEFAULT_STORE is None:
            settings = get_settings()
            logger.info(
                "Opening document store at %s (persist_to_disk=%s)", settings.db_path, settings.persist_to_disk
            )
            _DEFAULT_STORE = DurableStore(settings.db_path, persist=settings.persist_to_disk)
        return _DEFAULT_STORE


def set_default_store(store: DurableStore | None) -> None:
    """Swap the process-wide store; None forces a rebuild on next use."""
    global _DEFAULT_STORE
    with _DEFAULT_STORE_GUARD:
        _DEFAULT_STORE = store


def create_model(collection: str, store: DurableStore | None = None) -> CollectionAccessor:
    return CollectionAccessor(store if store is not None else get_default_store(), collection)
