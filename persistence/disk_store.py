from __future__ import annotations

import copy
import logging
import secrets
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from json_store import CorruptDocumentError, atomic_write_json, load_json_document

from .errors import DuplicateRecordError, InvalidRecordError
from .interfaces import DocumentStore
from .locks import GLOBAL_PATH_LOCKS
from .paths import default_db_path, ensure_dir
from .records import empty_store, ensure_collection, validate_fields

logger = logging.getLogger(__name__)

Record = dict[str, Any]

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

# Fields the store owns once a record exists (lookup keys and timestamps);
# updates that carry them are ignored.
_IMMUTABLE_ON_UPDATE = frozenset({"_id", "id", "createdAt", "updatedAt"})


def _base36(n: int) -> str:
    if n == 0:
        return "0"
    digits: list[str] = []
    while n:
        n, rem = divmod(n, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_id() -> str:
    """Millisecond timestamp plus a random fragment, both base-36."""
    return _base36(time.time_ns() // 1_000_000) + _base36(secrets.randbits(52))


def utc_now_iso() -> str:
    # Same shape as JavaScript's Date#toISOString: 2025-01-01T12:00:00.000Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _refreshed_timestamp(previous: Any) -> str:
    now = utc_now_iso()
    if isinstance(previous, str) and len(previous) == len(now) and previous > now:
        # Wall clock went backwards; updatedAt must not.
        return previous
    return now


def _matches_id(item: Mapping[str, Any], record_id: str) -> bool:
    return item.get("_id") == record_id or item.get("id") == record_id


def _index_of(items: list[Record], record_id: str) -> int | None:
    for i, item in enumerate(items):
        if _matches_id(item, record_id):
            return i
    return None


def _normalize_store(path: Path, raw: Any) -> dict[str, list[Record]]:
    if not isinstance(raw, dict):
        raise CorruptDocumentError(path, f"expected a JSON object, got {type(raw).__name__}")
    data = empty_store()
    for name, items in raw.items():
        if name not in data:
            logger.warning("Dropping unknown collection %r from %s", name, path)
            continue
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise CorruptDocumentError(path, f"collection {name!r} is not a list of objects")
        data[name] = items
    return data


class DurableStore(DocumentStore):
    """
    In-memory collections mirrored to a single JSON file.

    - Loads eagerly on construction; a missing, empty or unreadable file is
      replaced with an empty store right away.
    - Every mutation rewrites the whole file (temp file + rename).
    - Write failures are logged, never raised; memory stays authoritative.
    - Records handed out are copies.
    """

    def __init__(self, path: Path | None = None, *, persist: bool = True):
        self._path = Path(path) if path is not None else default_db_path()
        self._persist = persist
        self._lock = GLOBAL_PATH_LOCKS.lock_for(self._path)
        self._data: dict[str, list[Record]] = empty_store()
        if self._persist:
            ensure_dir(self._path.parent)
            self._load()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def persist(self) -> bool:
        return self._persist

    def reload(self) -> None:
        """Re-read the backing file, with the same recovery rules as construction."""
        if self._persist:
            self._load()

    def _load(self) -> None:
        with self._lock:
            try:
                raw = load_json_document(self._path)
                if raw is not None:
                    self._data = _normalize_store(self._path, raw)
                    logger.debug(
                        "Loaded document store %s (%s)",
                        self._path,
                        ", ".join(f"{k}={len(v)}" for k, v in self._data.items()),
                    )
                    return
                logger.info("No document store at %s; initializing empty store", self._path)
            except CorruptDocumentError as e:
                logger.error("Error loading JSON database %s: %s; starting empty", e.path, e.reason)
            self._data = empty_store()
            self._save()

    def _save(self) -> bool:
        if not self._persist:
            return True
        with self._lock:
            try:
                atomic_write_json(self._path, self._data)
            except OSError as e:
                logger.error("Error saving JSON database %s: %s", self._path, e)
                return False
            return True

    # ---------------------------------------------------------------
    # Reads
    # ---------------------------------------------------------------

    def collections(self) -> list[str]:
        with self._lock:
            return list(self._data.keys())

    def count(self, collection: str) -> int:
        with self._lock:
            return len(self._data.get(collection, []))

    def find_all(self, collection: str) -> list[Record]:
        with self._lock:
            return copy.deepcopy(self._data.get(collection, []))

    def find_by_id(self, collection: str, record_id: str) -> Record | None:
        with self._lock:
            items = self._data.get(collection, [])
            index = _index_of(items, record_id)
            if index is None:
                return None
            return copy.deepcopy(items[index])

    # ---------------------------------------------------------------
    # Mutations
    # ---------------------------------------------------------------

    def create(self, collection: str, fields: Mapping[str, Any]) -> Record:
        ensure_collection(collection)
        fields = dict(fields)
        validate_fields(collection, fields)

        with self._lock:
            items = self._data.setdefault(collection, [])
            taken = {
                value for item in items for value in (item.get("_id"), item.get("id")) if isinstance(value, str)
            }

            supplied = fields.get("_id")
            if supplied:
                if not isinstance(supplied, str):
                    raise InvalidRecordError(collection, "_id must be a string")
                if supplied in taken:
                    raise DuplicateRecordError(collection, supplied)
                record_id = supplied
            else:
                record_id = generate_id()
                while record_id in taken:
                    record_id = generate_id()

            legacy_id = fields.get("id")
            if legacy_id is not None and legacy_id != record_id:
                if not isinstance(legacy_id, str) or not legacy_id:
                    raise InvalidRecordError(collection, "id must be a non-empty string")
                if legacy_id in taken:
                    raise DuplicateRecordError(collection, legacy_id)

            now = utc_now_iso()
            record = {**fields, "_id": record_id, "createdAt": now, "updatedAt": now}
            items.append(record)
            self._save()
            logger.debug("Created %s/%s", collection, record_id)
            return copy.deepcopy(record)

    def update(self, collection: str, record_id: str, updates: Mapping[str, Any]) -> Record | None:
        ensure_collection(collection)
        changes = {k: v for k, v in updates.items() if k not in _IMMUTABLE_ON_UPDATE}
        ignored = sorted(set(updates) - set(changes))
        if ignored:
            logger.debug("Ignoring store-managed fields on update of %s/%s: %s", collection, record_id, ignored)
        with self._lock:
            items = self._data.get(collection, [])
            index = _index_of(items, record_id)
            if index is None:
                return None
            validate_fields(collection, changes)
            current = items[index]
            merged = {**current, **changes, "updatedAt": _refreshed_timestamp(current.get("updatedAt"))}
            items[index] = merged
            self._save()
            logger.debug("Updated %s/%s", collection, record_id)
            return copy.deepcopy(merged)

    def delete(self, collection: str, record_id: str) -> bool:
        ensure_collection(collection)
        with self._lock:
            items = self._data.get(collection, [])
            index = _index_of(items, record_id)
            if index is None:
                return False
            del items[index]
            self._save()
            logger.debug("Deleted %s/%s", collection, record_id)
            return True
