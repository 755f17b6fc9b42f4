"""Bounded TTL cache for resolution results."""

from __future__ import annotations

import json
import re
import time
from typing import Any, Callable, Dict, Optional

from .models import CacheEntry, ElementDescriptor

TEXT_KEY_LENGTH = 50
COMPACTION_SLACK = 10


def element_cache_key(descriptor: ElementDescriptor) -> str:
    """Fingerprint a descriptor's stable fields."""
    key_data = {
        "tagName": descriptor.tag_name,
        "id": descriptor.id,
        "className": descriptor.class_name,
        "textContent": (descriptor.text_content or "")[:TEXT_KEY_LENGTH] or None,
    }
    return "element_" + re.sub(r"[^a-zA-Z0-9]", "_", json.dumps(key_data, sort_keys=True))


def hierarchy_cache_key(framework: str) -> str:
    return f"hierarchy_{framework}"


class ResultCache:
    """Map of key -> :class:`CacheEntry` with per-entry TTL (seconds).

    Expired entries are dropped on lookup. Inserting into a full cache
    first sweeps expired entries, then evicts the oldest
    ``size - max_size + 10`` entries. Reads never refresh an entry.
    """

    def __init__(self, max_size: int = 100, clock: Callable[[], float] = time.monotonic) -> None:
        self.max_size = max_size
        self._clock = clock
        self._entries: Dict[str, CacheEntry[Any]] = {}

    def _expired(self, entry: CacheEntry[Any], now: float) -> bool:
        return now - entry.timestamp > entry.ttl

    def set(self, key: str, data: Any, ttl: float) -> None:
        if len(self._entries) >= self.max_size:
            self._compact()
        self._entries[key] = CacheEntry(data=data, timestamp=self._clock(), ttl=ttl)

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry, self._clock()):
            del self._entries[key]
            return None
        return entry.data

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        self._sweep()
        return len(self._entries)

    def _sweep(self) -> None:
        now = self._clock()
        for key in [k for k, e in self._entries.items() if self._expired(e, now)]:
            del self._entries[key]

    def _compact(self) -> None:
        self._sweep()
        if len(self._entries) < self.max_size:
            return
        remove_count = len(self._entries) - self.max_size + COMPACTION_SLACK
        oldest = sorted(self._entries.items(), key=lambda item: item[1].timestamp)
        for key, _ in oldest[:remove_count]:
            del self._entries[key]
