"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from app.schemas import (
    HealthResponse,
    HistoryResponse,
    IngestFailure,
    IngestResponse,
    MemoryUsage,
    ReadingOut,
    RootResponse,
    SimpleEntryOut,
    SimpleResponse,
    Stats,
    ROOT_NOTE,
    entry_out,
)
from services.ingestion import IngestionService, build_default_service

logger = logging.getLogger(__name__)

LIVENESS_TEXT = "OK - Node.js API is working!"

ENDPOINTS = {
    "postData": "POST /api/data",
    "getData": "GET /api/data",
    "health": "GET /api/health",
    "test": "GET /api/test",
    "simple": "GET /api/simple?temp=25&hum=60",
    "dashboard": "GET /dashboard",
}

router = APIRouter()


def get_service() -> IngestionService:
    return build_default_service()


@router.post(
    "/api/data",
    response_model=IngestResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"model": IngestFailure}},
    summary="Store a sensor reading sent as form, JSON or text.",
)
async def post_reading(
    request: Request,
    service: IngestionService = Depends(get_service),
):
    body = await request.body()
    try:
        outcome = service.ingest(
            content_type=request.headers.get("content-type"),
            body=body,
            client=request.headers.get("user-agent"),
        )
    except Exception as exc:  # noqa: BLE001 - reported to the client as a structured failure
        logger.exception("Failed to ingest reading", extra={"reason": str(exc)})
        failure = IngestFailure(error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=failure.model_dump(by_alias=True),
        )
    return IngestResponse(
        data=ReadingOut.from_record(outcome.reading),
        count=outcome.count,
        server=service.server_label,
    )


@router.get(
    "/api/data",
    response_model=HistoryResponse,
    summary="Return the stored history and request counters.",
)
async def get_readings(
    service: IngestionService = Depends(get_service),
) -> HistoryResponse:
    entries = service.history()
    return HistoryResponse(
        count=len(entries),
        data=[entry_out(entry) for entry in entries],
        stats=Stats.from_snapshot(service.counters()),
    )


@router.get(
    "/api/test",
    response_class=PlainTextResponse,
    summary="Plain-text liveness probe for clients that cannot parse JSON.",
)
async def liveness() -> PlainTextResponse:
    return PlainTextResponse(LIVENESS_TEXT)


@router.get(
    "/api/health",
    response_model=HealthResponse,
    summary="Health check endpoint.",
)
async def healthcheck(
    service: IngestionService = Depends(get_service),
) -> HealthResponse:
    snapshot = service.health()
    return HealthResponse(
        runtime=snapshot.runtime,
        uptime=snapshot.uptime,
        memory=MemoryUsage(
            max_rss=snapshot.memory.max_rss,
            gc_objects=snapshot.memory.gc_objects,
            gc_collections=list(snapshot.memory.gc_collections),
        ),
        requests=Stats.from_snapshot(snapshot.requests),
    )


@router.get(
    "/api/simple",
    response_model=SimpleResponse,
    summary="Store a reading passed as query parameters.",
)
async def simple_reading(
    temp: Optional[str] = Query(None, description="Temperature, stored as sent."),
    hum: Optional[str] = Query(None, description="Humidity, stored as sent."),
    service: IngestionService = Depends(get_service),
) -> SimpleResponse:
    entry = service.record_simple(temperature=temp, humidity=hum)
    return SimpleResponse(data=SimpleEntryOut.from_record(entry))


@router.get(
    "/",
    response_model=RootResponse,
    summary="List the available endpoints.",
)
async def root() -> RootResponse:
    return RootResponse(
        message="Arduino Sensor API",
        endpoints=dict(ENDPOINTS),
        note=ROOT_NOTE,
    )
