"""Pydantic schemas for the HTTP API layer.

Embedded clients expect camelCase keys, so every schema derives from
:class:`ApiModel`, which serializes field names through ``to_camel`` while
still accepting snake_case names in Python.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.records import CounterSnapshot, HistoryEntry, SensorReading, SimpleEntry

USAGE_HINT = "Send data as: temp=25.5&hum=60.0"
ROOT_NOTE = "Send sensor data as: temp=25.5&hum=60.0"


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReadingOut(ApiModel):
    """A reading stored by ``POST /api/data``."""

    id: int
    timestamp: str
    temperature: float
    humidity: float
    received_at: str
    client: str

    @classmethod
    def from_record(cls, record: SensorReading) -> "ReadingOut":
        return cls(
            id=record.id,
            timestamp=record.timestamp,
            temperature=record.temperature,
            humidity=record.humidity,
            received_at=record.received_at,
            client=record.client,
        )


class SimpleEntryOut(ApiModel):
    """A reading stored by ``GET /api/simple``; values are kept as sent."""

    timestamp: str
    temperature: str
    humidity: str
    method: Literal["GET"] = "GET"

    @classmethod
    def from_record(cls, record: SimpleEntry) -> "SimpleEntryOut":
        return cls(
            timestamp=record.timestamp,
            temperature=record.temperature,
            humidity=record.humidity,
            method=record.method,
        )


HistoryEntryOut = Union[ReadingOut, SimpleEntryOut]


def entry_out(record: HistoryEntry) -> HistoryEntryOut:
    if isinstance(record, SensorReading):
        return ReadingOut.from_record(record)
    return SimpleEntryOut.from_record(record)


class Stats(ApiModel):
    """Request counters since process start."""

    total_requests: int = Field(..., ge=0)
    successful_posts: int = Field(..., ge=0)
    last_request: Optional[str] = None

    @classmethod
    def from_snapshot(cls, snapshot: CounterSnapshot) -> "Stats":
        return cls(
            total_requests=snapshot.total_requests,
            successful_posts=snapshot.successful_posts,
            last_request=snapshot.last_request,
        )


class IngestResponse(ApiModel):
    success: Literal[True] = True
    message: str = "Data received successfully"
    data: ReadingOut
    count: int = Field(..., ge=0)
    server: str


class IngestFailure(ApiModel):
    success: Literal[False] = False
    error: str
    help: str = USAGE_HINT


class HistoryResponse(ApiModel):
    success: Literal[True] = True
    count: int = Field(..., ge=0)
    data: List[HistoryEntryOut] = Field(default_factory=list)
    stats: Stats


class MemoryUsage(ApiModel):
    max_rss: int = Field(..., description="Peak resident set size in bytes.")
    gc_objects: int = Field(..., description="Objects tracked by the garbage collector.")
    gc_collections: List[int] = Field(
        default_factory=list, description="Collections run per garbage collector generation."
    )


class HealthResponse(ApiModel):
    status: str = "online"
    server: str = "Arduino Sensor API"
    runtime: str
    uptime: float = Field(..., ge=0, description="Seconds since the service started.")
    memory: MemoryUsage
    requests: Stats


class SimpleResponse(ApiModel):
    received: Literal[True] = True
    data: SimpleEntryOut


class RootResponse(ApiModel):
    message: str
    endpoints: Dict[str, str]
    note: str
