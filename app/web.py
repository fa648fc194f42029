from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Iterable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.api import get_service
from models.records import HistoryEntry
from services.ingestion import DASHBOARD_WINDOW, IngestionService, format_local


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def _display_time(timestamp: str) -> str:
    candidate = timestamp
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(candidate)
    except ValueError:
        return timestamp
    return format_local(parsed)


def _dashboard_rows(entries: Iterable[HistoryEntry]) -> list[dict[str, object]]:
    return [
        {
            "when": _display_time(entry.timestamp),
            "temperature": entry.temperature,
            "humidity": entry.humidity,
        }
        for entry in entries
    ]


router = APIRouter(include_in_schema=False)


@router.get("/dashboard", name="dashboard", response_class=HTMLResponse)
async def dashboard(
    request: Request,
    service: IngestionService = Depends(get_service),
) -> HTMLResponse:
    entries = service.history()
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "total": len(entries),
            "rows": _dashboard_rows(entries[:DASHBOARD_WINDOW]),
        },
    )
