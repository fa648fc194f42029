"""Ingestion and query orchestration over the in-memory sensor store."""

from __future__ import annotations

import gc
import logging
import platform
import resource
import sys
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from typing import Callable, List, Optional

from datastore.memory_store import InMemorySensorStore, build_default_store
from models.records import CounterSnapshot, HistoryEntry, SensorReading, SimpleEntry
from services.payloads import parse_payload
from settings import get_settings

logger = logging.getLogger(__name__)

DASHBOARD_WINDOW = 10
UNKNOWN_CLIENT = "Unknown"


@dataclass(frozen=True)
class IngestOutcome:
    reading: SensorReading
    count: int


@dataclass(frozen=True)
class MemorySnapshot:
    max_rss: int
    gc_objects: int
    gc_collections: List[int] = field(default_factory=list)


@dataclass(frozen=True)
class HealthSnapshot:
    runtime: str
    uptime: float
    memory: MemorySnapshot
    requests: CounterSnapshot


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_local(moment: datetime) -> str:
    """US-style local time without zero padding, e.g. ``1/5/2026, 3:04:05 PM``."""
    local = moment.astimezone()
    hour = local.hour % 12 or 12
    return (
        f"{local.month}/{local.day}/{local.year}, "
        f"{hour}:{local:%M}:{local:%S} {local:%p}"
    )


def _memory_snapshot() -> MemorySnapshot:
    max_rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    if sys.platform != "darwin":
        # Linux reports kilobytes.
        max_rss *= 1024
    return MemorySnapshot(
        max_rss=max_rss,
        gc_objects=len(gc.get_objects()),
        gc_collections=[generation["collections"] for generation in gc.get_stats()],
    )


class IngestionService:
    """Owns the sensor history and request counters for the process."""

    def __init__(
        self,
        store: InMemorySensorStore,
        server_label: str,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.server_label = server_label
        self._clock = clock
        self._started = time.monotonic()

    def ingest(
        self,
        content_type: Optional[str],
        body: bytes,
        client: Optional[str] = None,
    ) -> IngestOutcome:
        """Count the request, decode the body and store the resulting reading.

        The request is counted before decoding, so it is tallied even when
        decoding raises.
        """
        received = self._clock()
        self.store.record_request(format_timestamp(received))
        logger.info(
            "Received POST to /api/data",
            extra={"content_type": content_type or "-", "client": client or UNKNOWN_CLIENT},
        )

        parsed = parse_payload(content_type, body)
        reading = SensorReading(
            id=int(received.timestamp() * 1000),
            timestamp=format_timestamp(received),
            temperature=parsed.temperature,
            humidity=parsed.humidity,
            received_at=format_local(received),
            client=client or UNKNOWN_CLIENT,
        )
        reading, count = self.store.push_reading(reading)
        logger.info(
            "Data stored",
            extra={
                "payload_format": parsed.payload_format.value,
                "temperature": reading.temperature,
                "humidity": reading.humidity,
                "history_size": count,
            },
        )
        return IngestOutcome(reading=reading, count=count)

    def record_simple(self, temperature: Optional[str], humidity: Optional[str]) -> SimpleEntry:
        entry = SimpleEntry(
            timestamp=format_timestamp(self._clock()),
            temperature=temperature or "0",
            humidity=humidity or "0",
        )
        count = self.store.push_entry(entry)
        logger.info(
            "Query-string reading stored",
            extra={
                "temperature": entry.temperature,
                "humidity": entry.humidity,
                "history_size": count,
            },
        )
        return entry

    def history(self) -> list[HistoryEntry]:
        return self.store.entries()

    def counters(self) -> CounterSnapshot:
        return self.store.counters()

    def health(self) -> HealthSnapshot:
        return HealthSnapshot(
            runtime=f"Python {platform.python_version()}",
            uptime=time.monotonic() - self._started,
            memory=_memory_snapshot(),
            requests=self.store.counters(),
        )


@lru_cache
def build_default_service() -> IngestionService:
    """Factory that wires the service with the process-wide store."""
    settings = get_settings()
    return IngestionService(store=build_default_store(), server_label=settings.server_label)

