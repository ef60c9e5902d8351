from __future__ import annotations

from typing import Any


class StoreError(Exception):
    """Base class for errors raised by the document store."""


class UnknownCollectionError(StoreError, KeyError):
    def __init__(self, collection: str):
        super().__init__(collection)
        self.collection = collection

    def __str__(self) -> str:
        return f"unknown collection: {self.collection!r}"


class DuplicateRecordError(StoreError):
    def __init__(self, collection: str, record_id: str):
        super().__init__(f"{collection}: a record with _id {record_id!r} already exists")
        self.collection = collection
        self.record_id = record_id


class InvalidRecordError(StoreError, ValueError):
    """Raised when fields do not satisfy the collection's record model."""

    def __init__(self, collection: str, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(f"{collection}: {message}")
        self.collection = collection
        self.errors = errors or []
