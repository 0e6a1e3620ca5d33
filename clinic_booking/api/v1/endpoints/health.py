"""Health check endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from clinic_booking.config import settings
from clinic_booking.database import check_database_connection
from clinic_booking.dependencies import get_booked_slot_poller
from clinic_booking.services.availability_service import BookedSlotPoller

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str


class PollerHealth(BaseModel):
    """State of the booked-slot refresh loop."""

    running: bool
    stale: bool
    degraded: bool
    fetched_at: datetime | None
    interval_seconds: float


class DetailedHealthResponse(HealthResponse):
    """Health including the database and availability snapshot."""

    database: str
    availability: PollerHealth


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Basic health check",
)
async def health_check() -> HealthResponse:
    """Liveness probe."""
    return HealthResponse(
        status="healthy",
        version=settings.app_version,
        environment=settings.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Detailed health check",
)
async def detailed_health_check(
    poller: Annotated[BookedSlotPoller, Depends(get_booked_slot_poller)],
) -> DetailedHealthResponse:
    """
    Readiness check.

    The service is degraded when the database is unreachable or the last
    booking refresh failed, since slots are then offered without knowing
    which are taken.
    """
    db_healthy = await check_database_connection()
    snapshot = poller.snapshot
    snapshot_degraded = snapshot is not None and snapshot.degraded

    return DetailedHealthResponse(
        status="healthy" if db_healthy and not snapshot_degraded else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        database="healthy" if db_healthy else "unhealthy",
        availability=PollerHealth(
            running=poller.is_running,
            stale=poller.is_stale(),
            degraded=snapshot_degraded,
            fetched_at=snapshot.fetched_at if snapshot else None,
            interval_seconds=poller.interval_seconds,
        ),
    )


@router.get(
    "/ping",
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Simple ping",
)
async def ping() -> dict[str, str]:
    return {"message": "pong"}
