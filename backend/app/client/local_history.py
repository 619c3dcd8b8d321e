from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol
import json
import logging

logger = logging.getLogger("app.client")

HISTORY_KEY = "ai-summarizer:history"
HISTORY_CAPACITY = 50


@dataclass(frozen=True)
class LocalHistoryEntry:
    original_text: str
    summary: str
    created_at: str  # ISO timestamp, local join key
    id: Optional[str] = None

    @property
    def saved(self) -> bool:
        return self.id is not None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "originalText": self.original_text,
            "summary": self.summary,
            "createdAt": self.created_at,
        }
        if self.id is not None:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LocalHistoryEntry":
        return cls(
            original_text=str(data["originalText"]),
            summary=str(data["summary"]),
            created_at=str(data["createdAt"]),
            id=str(data["id"]) if data.get("id") else None,
        )


class KeyValueStorage(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStorage:
    def __init__(self) -> None:
        self._data: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """Key/value storage kept as one JSON object in a file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except ValueError as exc:
            # Unreadable content is dropped on the next write
            logger.warning("Ignoring corrupt local storage %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        tmp.replace(self.path)

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


class LocalHistoryStore:
    """Bounded most-recent-first log of summaries kept on the client.

    Never authoritative; it backs the history view when the server listing
    is unavailable.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = HISTORY_KEY,
        capacity: int = HISTORY_CAPACITY,
    ) -> None:
        self.storage = storage
        self.key = key
        self.capacity = capacity

    def load(self) -> List[LocalHistoryEntry]:
        try:
            raw = self.storage.get_item(self.key)
            if not raw:
                return []
            items = json.loads(raw)
            return [LocalHistoryEntry.from_dict(i) for i in items]
        except (OSError, ValueError, TypeError, KeyError) as exc:
            logger.warning("Failed to load local history: %s", exc)
            return []

    def _write(self, items: List[LocalHistoryEntry]) -> None:
        self.storage.set_item(self.key, json.dumps([i.to_dict() for i in items], ensure_ascii=False))

    def add(self, entry: LocalHistoryEntry) -> None:
        self._write([entry, *self.load()][: self.capacity])

    def attach_id(self, created_at: str, record_id: str) -> bool:
        items = self.load()
        for idx, item in enumerate(items):
            if item.created_at == created_at:
                items[idx] = replace(item, id=record_id)
                self._write(items)
                return True
        return False

    def clear(self) -> None:
        self.storage.remove_item(self.key)

    def search(self, q: Optional[str] = None, limit: int = 20) -> List[LocalHistoryEntry]:
        items = self.load()
        term = (q or "").strip().casefold()
        if term:
            items = [
                i for i in items
                if term in i.summary.casefold() or term in i.original_text.casefold()
            ]
        return items[:limit]
