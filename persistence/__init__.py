from __future__ import annotations

from .disk_store import DurableStore, generate_id
from .errors import DuplicateRecordError, InvalidRecordError, StoreError, UnknownCollectionError
from .records import COLLECTIONS
from .repositories import (
    CollectionAccessor,
    create_model,
    get_default_store,
    set_default_store,
)

__all__ = [
    "COLLECTIONS",
    "DurableStore",
    "generate_id",
    "CollectionAccessor",
    "create_model",
    "get_default_store",
    "set_default_store",
    "StoreError",
    "UnknownCollectionError",
    "DuplicateRecordError",
    "InvalidRecordError",
]
