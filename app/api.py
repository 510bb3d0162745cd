"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas import HistoryResponse, IngestRequest, IngestResponse
from models.errors import FormatError, NotFound, StoreError
from services.analyzer import AnalysisResult, StatsReport
from services.monitor import MonitorService, SensorStatus, build_default_monitor

logger = logging.getLogger(__name__)

router = APIRouter()
api = APIRouter(prefix="/api", tags=["sensor"])

VALID_MESSAGE = "传感器工作正常"
SUSPECT_MESSAGE = "传感器可能存在问题"
STORE_FAILURE_MESSAGE = "保存数据失败"


def get_monitor() -> MonitorService:
    return build_default_monitor()


def _store_failure(exc: StoreError) -> HTTPException:
    logger.error("Failed to store reading: %s", exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=STORE_FAILURE_MESSAGE,
    )


@api.post(
    "/data",
    response_model=IngestResponse,
    summary="Ingest one raw reading from the device.",
)
def ingest_reading(
    body: IngestRequest,
    monitor: MonitorService = Depends(get_monitor),
) -> IngestResponse:
    try:
        reading = monitor.ingest(body.data)
    except FormatError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except StoreError as exc:
        raise _store_failure(exc) from exc
    message = VALID_MESSAGE if reading.is_valid else SUSPECT_MESSAGE
    return IngestResponse(data=reading, message=message)


@api.get(
    "/status",
    response_model=SensorStatus,
    summary="Sensor health and the most recent reading.",
)
def sensor_status(monitor: MonitorService = Depends(get_monitor)) -> SensorStatus:
    try:
        return monitor.current_status()
    except NotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


@api.get(
    "/history",
    response_model=HistoryResponse,
    summary="Stored readings, newest first.",
)
def reading_history(
    hours: Optional[int] = Query(None, description="Only readings from the last N hours."),
    limit: Optional[int] = Query(None, description="Maximum number of readings."),
    monitor: MonitorService = Depends(get_monitor),
) -> HistoryResponse:
    readings = monitor.history(hours=hours, limit=limit)
    return HistoryResponse(count=len(readings), data=readings)


@api.get(
    "/stats",
    response_model=StatsReport,
    summary="Descriptive statistics per metric and current anomalies.",
)
def reading_stats(
    hours: Optional[int] = Query(None, description="Window size in hours (default 24)."),
    monitor: MonitorService = Depends(get_monitor),
) -> StatsReport:
    return monitor.stats(hours)


@api.get(
    "/analysis",
    response_model=AnalysisResult,
    summary="Correlations, hourly trend, AQI and suggestions.",
)
def reading_analysis(
    hours: Optional[int] = Query(None, description="Window size in hours (default 24)."),
    monitor: MonitorService = Depends(get_monitor),
) -> AnalysisResult:
    try:
        return monitor.analysis(hours)
    except NotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /ui for the dashboard."}


router.include_router(api)
