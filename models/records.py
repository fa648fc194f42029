"""Domain models shared across services."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True, slots=True)
class SensorReading:
    """A reading accepted through ``POST /api/data``."""

    id: int
    timestamp: str
    temperature: float
    humidity: float
    received_at: str
    client: str


@dataclass(frozen=True, slots=True)
class SimpleEntry:
    """A reading accepted through the query-string endpoint, stored verbatim."""

    timestamp: str
    temperature: str
    humidity: str
    method: str = "GET"


HistoryEntry = Union[SensorReading, SimpleEntry]


@dataclass(frozen=True, slots=True)
class CounterSnapshot:
    total_requests: int
    successful_posts: int
    last_request: Optional[str]
