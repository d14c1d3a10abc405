"""Persisted fallback slot for the employee collection.

The store client never touches storage directly: it goes through
``EmployeeCacheRepository``, which serializes the whole collection into one
named slot of a key/value ``CacheStorage``.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from employee_directory.models.employee import CachedEmployee

logger = logging.getLogger(__name__)

_ENTRIES = TypeAdapter(list[CachedEmployee])


class CacheStorage(Protocol):
    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class InMemoryStorage:
    def __init__(self, items: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(items or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class JsonFileStorage:
    """Slots kept as string values of a single JSON object on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Cache file %s unreadable, starting empty", self.path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Cache file %s is not a JSON object, starting empty", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, items: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(items), encoding="utf-8")
        tmp.replace(self.path)

    def get_item(self, key: str) -> str | None:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read()
        items[key] = value
        self._write(items)

    def remove_item(self, key: str) -> None:
        items = self._read()
        if items.pop(key, None) is not None:
            self._write(items)


class EmployeeCacheRepository:
    def __init__(self, storage: CacheStorage, slot: str = "employees") -> None:
        self.storage = storage
        self.slot = slot

    def load(self) -> list[CachedEmployee]:
        raw = self.storage.get_item(self.slot)
        if not raw:
            return []
        try:
            return _ENTRIES.validate_json(raw)
        except ValidationError:
            logger.warning("Cache slot '%s' holds invalid data, ignoring it", self.slot)
            return []

    def save(self, entries: list[CachedEmployee]) -> None:
        self.storage.set_item(self.slot, _ENTRIES.dump_json(entries, by_alias=True).decode("utf-8"))

    def clear(self) -> None:
        self.storage.remove_item(self.slot)

    def find(self, employee_id: int) -> CachedEmployee | None:
        for entry in self.load():
            if entry.id == employee_id:
                return entry
        return None

    def next_id(self) -> int:
        entries = self.load()
        return max(e.id for e in entries) + 1 if entries else 1


def build_cache_repository(cache_file: str, slot: str) -> EmployeeCacheRepository:
    return EmployeeCacheRepository(JsonFileStorage(cache_file), slot)
