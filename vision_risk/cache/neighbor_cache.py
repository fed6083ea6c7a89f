"""
Neighbor cache: (network, address, requested limit) → {graph, stats} with a timestamp.

An entry is fresh while now - timestamp < ttl. Stale entries are treated as
absent at read time and overwritten by the next write. The map holds at most
max_entries keys; writing past that evicts the least recently written key.
The clock is injectable for tests.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from vision_risk.core.addresses import normalize_address

T = TypeVar("T")

DEFAULT_MAX_ENTRIES = 4096


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    timestamp: float
    payload: T

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.timestamp < ttl


class NeighborCache(Generic[T]):
    def __init__(
        self,
        ttl_sec: float,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = DEFAULT_MAX_ENTRIES,
    ) -> None:
        self.ttl_sec = ttl_sec
        self.max_entries = max(1, int(max_entries))
        self._clock = clock
        self._entries: dict[tuple[str, str, int], CacheEntry[T]] = {}

    @staticmethod
    def key(network: str, address: str, limit: int) -> tuple[str, str, int]:
        return (normalize_address(network), normalize_address(address), int(limit))

    def get(self, network: str, address: str, limit: int) -> T | None:
        """Fresh payload for the key, or None when missing or stale."""
        entry = self._entries.get(self.key(network, address, limit))
        if entry is None or not entry.is_fresh(self._clock(), self.ttl_sec):
            return None
        return entry.payload

    def put(self, network: str, address: str, limit: int, payload: T) -> None:
        key = self.key(network, address, limit)
        # dicts keep insertion order; re-inserting moves the key to the end
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(timestamp=self._clock(), payload=payload)
        while len(self._entries) > self.max_entries:
            del self._entries[next(iter(self._entries))]

    def __len__(self) -> int:
        return len(self._entries)
