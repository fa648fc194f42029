from __future__ import annotations

from dataclasses import replace
from functools import lru_cache
from threading import Lock
from typing import List, Optional

from models.records import CounterSnapshot, HistoryEntry, SensorReading, SimpleEntry

HISTORY_CAPACITY = 100


class InMemorySensorStore:
    """Process-lifetime history of readings plus request counters."""

    def __init__(self, capacity: int = HISTORY_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("History capacity must be positive.")
        self.capacity = capacity
        self._entries: List[HistoryEntry] = []
        self._total_requests = 0
        self._successful_posts = 0
        self._last_request: Optional[str] = None
        self._last_id = 0
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def record_request(self, at: str) -> None:
        with self._lock:
            self._total_requests += 1
            self._last_request = at

    def push_reading(self, reading: SensorReading) -> tuple[SensorReading, int]:
        """Store a reading at the front, evict past capacity and count the success.

        The reading's ``id`` is taken as a millisecond timestamp and bumped past
        the previous id when the clock has not advanced, so ids always descend
        from the front of the history. Returns the stored reading and the new
        history length.
        """
        with self._lock:
            self._last_id = max(reading.id, self._last_id + 1)
            if reading.id != self._last_id:
                reading = replace(reading, id=self._last_id)
            self._entries.insert(0, reading)
            del self._entries[self.capacity:]
            self._successful_posts += 1
            return reading, len(self._entries)

    def push_entry(self, entry: SimpleEntry) -> int:
        # Query-string entries are not subject to the capacity limit.
        with self._lock:
            self._entries.insert(0, entry)
            return len(self._entries)

    def entries(self, limit: Optional[int] = None) -> list[HistoryEntry]:
        with self._lock:
            if limit is None:
                return list(self._entries)
            return self._entries[:limit]

    def counters(self) -> CounterSnapshot:
        with self._lock:
            return CounterSnapshot(
                total_requests=self._total_requests,
                successful_posts=self._successful_posts,
                last_request=self._last_request,
            )


@lru_cache
def build_default_store() -> InMemorySensorStore:
    return InMemorySensorStore()
