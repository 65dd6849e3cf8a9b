"""HTTP route definitions for the gateway."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, status

from app.schemas import ErrorResponse, HealthStatus, HistoryRecord, VoltageReading, VoltageStats
from services.telemetry import DEFAULT_HISTORY_HOURS, TelemetryService, build_default_service

router = APIRouter()

_ERROR_RESPONSES = {
    status.HTTP_404_NOT_FOUND: {"model": ErrorResponse, "description": "No data stored."},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse, "description": "Store read failed."},
}


def get_telemetry_service() -> TelemetryService:
    return build_default_service()


def _iso_now() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@router.get(
    "/health",
    response_model=HealthStatus,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> HealthStatus:
    return HealthStatus(status="OK", timestamp=_iso_now())


@router.get(
    "/api/voltages",
    response_model=VoltageReading,
    responses=_ERROR_RESPONSES,
    summary="Current per-phase voltages and their total.",
)
def get_current_voltages(
    service: TelemetryService = Depends(get_telemetry_service),
) -> VoltageReading:
    return service.current_readings()


@router.get(
    "/api/voltages/history",
    response_model=list[HistoryRecord],
    responses={status.HTTP_500_INTERNAL_SERVER_ERROR: _ERROR_RESPONSES[500]},
    summary="Stored readings within the last N hours, oldest first.",
)
def get_voltage_history(
    hours: float = Query(DEFAULT_HISTORY_HOURS, description="Size of the time window in hours."),
    service: TelemetryService = Depends(get_telemetry_service),
) -> list[HistoryRecord]:
    return service.history(hours=hours)


@router.get(
    "/api/voltages/stats",
    response_model=VoltageStats,
    responses=_ERROR_RESPONSES,
    summary="Average, maximum and minimum over the latest 100 readings.",
)
def get_voltage_stats(
    service: TelemetryService = Depends(get_telemetry_service),
) -> VoltageStats:
    return service.stats()
