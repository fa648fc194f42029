from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import ENDPOINTS, router
from app.web import router as web_router
from datastore.memory_store import build_default_store
from logging_config import configure_logging
from services.ingestion import build_default_service
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    build_default_service()
    logger.info("Endpoints: %s", ", ".join(ENDPOINTS.values()))
    try:
        yield
    finally:
        build_default_service.cache_clear()
        build_default_store.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Arduino Sensor API",
        description="In-memory ingestion endpoint for temperature and humidity readings.",
        version="0.1.0",
        lifespan=lifespan,
    )
    # Devices post from arbitrary origins.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    app.include_router(web_router)
    return app


def serve(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the API under uvicorn using environment settings for anything not given."""
    settings = get_settings()
    bind_host = host or settings.host
    bind_port = port or settings.port
    configure_logging()
    logger.info("Arduino Sensor API running on port %d", bind_port)
    uvicorn.run(app, host=bind_host, port=bind_port, log_config=None)


app = create_app()


if __name__ == "__main__":
    serve()
