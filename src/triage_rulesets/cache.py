"""TimedCache — an explicit, immutable time-boxed cache value.

There is no process-wide cache in the SDK.  A caller (a request context, a
session) owns a ``TimedCache`` and threads it through calls; ``put`` returns
a new cache and never mutates the receiver, so a cache can be shared
between readers without locking.

Timestamps are plain floats supplied by the caller (``time.time()`` or a
fake clock in tests).  Entries older than ``ttl_seconds`` are misses.  A
cache never holds more than ``max_entries`` values: ``put`` drops the
oldest entries to make room.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping, Optional

from triage_rulesets.constants import GUIDANCE_CACHE_MAX_ENTRIES, GUIDANCE_CACHE_TTL_SECONDS


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float


@dataclass(frozen=True)
class TimedCache:
    ttl_seconds: float = GUIDANCE_CACHE_TTL_SECONDS
    max_entries: int = GUIDANCE_CACHE_MAX_ENTRIES
    entries: Mapping[str, CacheEntry] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if self.max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {self.max_entries}")

    def get(self, key: str, now: float) -> Optional[Any]:
        """Return the live value for *key*, or None if missing or expired."""
        entry = self.entries.get(key)
        if entry is None or now - entry.stored_at > self.ttl_seconds:
            return None
        return entry.value

    def put(self, key: str, value: Any, now: float) -> TimedCache:
        """Return a new cache with *key* set to *value* at time *now*.

        When the cache is full the oldest entries are dropped first.
        """
        entries = {k: e for k, e in self.entries.items() if k != key}
        overflow = len(entries) + 1 - self.max_entries
        if overflow > 0:
            oldest = sorted(entries, key=lambda k: entries[k].stored_at)[:overflow]
            for stale in oldest:
                del entries[stale]
        entries[key] = CacheEntry(value=value, stored_at=now)
        return replace(self, entries=MappingProxyType(entries))

    def evict_expired(self, now: float) -> TimedCache:
        """Return a new cache without expired entries."""
        live = {
            k: e for k, e in self.entries.items()
            if now - e.stored_at <= self.ttl_seconds
        }
        return replace(self, entries=MappingProxyType(live))

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return key in self.entries


def make_cache_key(*parts: Any) -> str:
    """Stable key for arbitrary JSON-like parts (dict key order is ignored)."""
    payload = json.dumps(parts, sort_keys=True, default=str, ensure_ascii=False)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
