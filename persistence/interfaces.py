from __future__ import annotations

from typing import Any, Mapping, Protocol


class DocumentStore(Protocol):
    """
    Synchronous, collection-oriented record store.

    Not-found is reported as None/False, never raised.
    """

    def find_all(self, collection: str) -> list[dict[str, Any]]: ...
    def find_by_id(self, collection: str, record_id: str) -> dict[str, Any] | None: ...
    def create(self, collection: str, fields: Mapping[str, Any]) -> dict[str, Any]: ...
    def update(self, collection: str, record_id: str, updates: Mapping[str, Any]) -> dict[str, Any] | None: ...
    def delete(self, collection: str, record_id: str) -> bool: ...


class AsyncCollection(Protocol):
    """Mongoose-style model bound to one collection."""

    async def find(self, query: Mapping[str, Any] | None = None) -> list[dict[str, Any]]: ...
    async def find_by_id(self, record_id: str) -> dict[str, Any] | None: ...
    async def find_one(self, query: Mapping[str, Any] | None = None) -> dict[str, Any] | None: ...
    async def create(self, data: Mapping[str, Any]) -> dict[str, Any]: ...
    async def find_by_id_and_update(self, record_id: str, updates: Mapping[str, Any]) -> dict[str, Any] | None: ...
    async def find_by_id_and_delete(self, record_id: str) -> dict[str, str] | None: ...
