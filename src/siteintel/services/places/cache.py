"""Two-tier POI cache with in-flight request deduplication.

Memory tier
    Full ``POIRecord`` lists for map markers. Short TTL, capacity bounded,
    evicts the least recently accessed entry.

Durable tier
    ``AggregatedIntel`` only (counts and labels, roughly 1 KB per ward), kept
    in a ``KeyValueStore`` as JSON ``{"data": ..., "expiresAt": ...}``. Long
    TTL, capacity bounded, evicts the entry that expires first.

Both tiers are best effort: storage problems and corrupted payloads degrade
to a miss and are never raised to the caller.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Sequence, TypeVar

from ...config import settings
from ...models.domain import AggregatedIntel
from ...persistence.kv_store import KeyValueStore, MemoryKeyValueStore

DURABLE_KEY_PREFIX = "geo_intel_v1_"

T = TypeVar("T")

logger = logging.getLogger(__name__)


def build_cache_key(lat: float, lng: float, radius_m: float, place_types: Sequence[str]) -> str:
    """Canonical memory-tier key: 4-decimal coordinates (~11 m), radius and sorted types."""
    types = "+".join(sorted(place_types))
    return f"{lat:.4f}_{lng:.4f}_{_format_radius(radius_m)}_{types}"


def build_ward_key(lat: float, lng: float, radius_m: float) -> str:
    """Durable-tier key: 3-decimal coordinates (~110 m), so nearby clicks share a bucket."""
    return f"{DURABLE_KEY_PREFIX}{lat:.3f}_{lng:.3f}_{_format_radius(radius_m)}"


def _format_radius(radius_m: float) -> str:
    return str(int(radius_m)) if float(radius_m).is_integer() else f"{radius_m:g}"


def _decode_durable(raw: str) -> tuple[float, AggregatedIntel]:
    """Parse a stored ``{"data", "expiresAt"}`` envelope; raises ValueError on any shape mismatch."""
    entry = json.loads(raw)
    if not isinstance(entry, dict) or not isinstance(entry.get("data"), dict):
        raise ValueError("durable entry is not a {data, expiresAt} object")
    return float(entry["expiresAt"]), AggregatedIntel.from_dict(entry["data"])


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    data: T
    expires_at: float
    last_accessed: float = 0.0


class PlacesCache:
    """Cache service shared by every query issued from one process."""

    def __init__(
        self,
        store: KeyValueStore | None = None,
        *,
        clock: Callable[[], float] = time.time,
        memory_ttl_seconds: float | None = None,
        memory_max_entries: int | None = None,
        durable_ttl_seconds: float | None = None,
        durable_max_entries: int | None = None,
    ) -> None:
        self.store: KeyValueStore = store if store is not None else MemoryKeyValueStore()
        self.clock = clock
        self.memory_ttl = memory_ttl_seconds if memory_ttl_seconds is not None else settings.memory_cache_ttl_seconds
        self.memory_max_entries = (
            memory_max_entries if memory_max_entries is not None else settings.memory_cache_max_entries
        )
        self.durable_ttl = durable_ttl_seconds if durable_ttl_seconds is not None else settings.durable_cache_ttl_seconds
        self.durable_max_entries = (
            durable_max_entries if durable_max_entries is not None else settings.durable_cache_max_entries
        )
        self._memory: dict[str, CacheEntry[Any]] = {}
        self._in_flight: dict[str, asyncio.Future[Any]] = {}

    # -- memory tier ---------------------------------------------------------

    def get_memory(self, key: str) -> Any | None:
        entry = self._memory.get(key)
        if entry is None:
            return None
        now = self.clock()
        if now >= entry.expires_at:
            del self._memory[key]
            logger.debug(f"Memory cache expired for [{key}]")
            return None
        entry.last_accessed = now
        logger.debug(f"Memory cache HIT for [{key}]")
        return entry.data

    def set_memory(self, key: str, data: Any) -> None:
        if key not in self._memory:
            self._evict_memory_if_needed()
        now = self.clock()
        self._memory[key] = CacheEntry(data=data, expires_at=now + self.memory_ttl, last_accessed=now)

    def _evict_memory_if_needed(self) -> None:
        if len(self._memory) < self.memory_max_entries:
            return
        oldest_key = min(self._memory, key=lambda k: self._memory[k].last_accessed)
        del self._memory[oldest_key]
        logger.debug(f"Memory cache evicted least recently used [{oldest_key}]")

    def clear_memory(self) -> None:
        self._memory.clear()

    # -- durable tier --------------------------------------------------------

    def get_durable(self, ward_key: str) -> AggregatedIntel | None:
        try:
            raw = self.store.get(ward_key)
        except UnicodeDecodeError as exc:
            logger.warning(f"Dropping undecodable durable cache entry [{ward_key}]: {exc}")
            self._delete_durable(ward_key)
            return None
        except OSError as exc:
            logger.warning(f"Durable cache read failed for [{ward_key}]: {exc}")
            return None
        if raw is None:
            return None
        try:
            expires_at, data = _decode_durable(raw)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning(f"Dropping malformed durable cache entry [{ward_key}]: {exc}")
            self._delete_durable(ward_key)
            return None
        if self.clock() >= expires_at:
            self._delete_durable(ward_key)
            return None
        logger.debug(f"Durable cache HIT for [{ward_key}]")
        return data

    def set_durable(self, ward_key: str, data: AggregatedIntel) -> None:
        payload = json.dumps({"data": data.to_dict(), "expiresAt": self.clock() + self.durable_ttl})
        try:
            if ward_key not in self._durable_keys():
                self._evict_durable_if_needed()
            self.store.set(ward_key, payload)
        except OSError as exc:
            logger.warning(f"Durable cache write failed for [{ward_key}] (quota or disabled): {exc}")

    def _durable_keys(self) -> list[str]:
        return [key for key in self.store.keys() if key.startswith(DURABLE_KEY_PREFIX)]

    def _evict_durable_if_needed(self) -> None:
        keys = self._durable_keys()
        if len(keys) < self.durable_max_entries:
            return
        oldest_key: str | None = None
        oldest_expiry = float("inf")
        for key in keys:
            try:
                raw = self.store.get(key)
                if raw is None:
                    continue
                expires_at = float(json.loads(raw)["expiresAt"])
            except OSError as exc:
                logger.warning(f"Durable cache read failed for [{key}] during eviction: {exc}")
                continue
            except (ValueError, KeyError, TypeError):
                # Corrupt or undecodable entries are the first to go.
                oldest_key = key
                break
            if expires_at < oldest_expiry:
                oldest_expiry = expires_at
                oldest_key = key
        if oldest_key is not None:
            self._delete_durable(oldest_key)
            logger.debug(f"Durable cache evicted [{oldest_key}]")

    def _delete_durable(self, ward_key: str) -> None:
        try:
            self.store.delete(ward_key)
        except OSError as exc:
            logger.warning(f"Durable cache delete failed for [{ward_key}]: {exc}")

    def clear_durable(self) -> int:
        removed = 0
        try:
            for key in self._durable_keys():
                self.store.delete(key)
                removed += 1
        except OSError as exc:
            logger.warning(f"Durable cache clear failed after {removed} entries: {exc}")
        logger.info(f"Durable cache cleared ({removed} entries)")
        return removed

    # -- in-flight deduplication ---------------------------------------------

    async def deduplicated_fetch(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Share one pending fetch between all concurrent callers of ``key``.

        The registry entry is dropped once the fetch settles, whether it
        succeeded or raised. Callers that stop waiting do not cancel the
        shared fetch.
        """
        future = self._in_flight.get(key)
        if future is None:
            future = asyncio.ensure_future(factory())
            self._in_flight[key] = future
            future.add_done_callback(lambda done, key=key: self._release(key, done))
        else:
            logger.debug(f"In-flight dedup HIT for [{key}], reusing pending request")
        return await asyncio.shield(future)

    def _release(self, key: str, future: asyncio.Future[Any]) -> None:
        if self._in_flight.get(key) is future:
            del self._in_flight[key]
        if not future.cancelled() and future.exception() is not None:
            logger.debug(f"In-flight fetch for [{key}] failed: {future.exception()!r}")

    # -- diagnostics ---------------------------------------------------------

    def stats(self) -> dict[str, int]:
        try:
            durable_entries = len(self._durable_keys())
        except OSError:
            durable_entries = 0
        return {
            "memory_entries": len(self._memory),
            "durable_entries": durable_entries,
            "in_flight": len(self._in_flight),
        }
