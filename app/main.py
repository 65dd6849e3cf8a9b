from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import router
from logging_config import configure_logging
from services.errors import TelemetryError
from services.telemetry import build_default_service
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    # Builds the store eagerly so missing configuration aborts startup.
    service = build_default_service()
    logger.info(
        "Telemetry gateway ready",
        extra={
            "path": service.readings_path,
            "backend": settings.store_backend,
            "project_id": settings.firebase_project_id,
        },
    )
    try:
        yield
    finally:
        build_default_service.cache_clear()


async def telemetry_error_handler(_request: Request, exc: TelemetryError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error while serving request",
        exc_info=exc,
        extra={"path": request.url.path},
    )
    return JSONResponse(status_code=500, content={"error": "internal server error"})


def create_app() -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Voltage Telemetry Gateway",
        description="Read-only JSON gateway over three-phase voltage telemetry.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_exception_handler(TelemetryError, telemetry_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(router)
    return app

app = create_app()
