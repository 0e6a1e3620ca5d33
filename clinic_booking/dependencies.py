"""FastAPI dependencies."""

from functools import lru_cache
from typing import Annotated, Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.config import settings
from clinic_booking.core.clock import Clock
from clinic_booking.core.security import STAFF_ROLE, decode_access_token
from clinic_booking.database import AsyncSessionLocal, get_db
from clinic_booking.services.appointment_service import AppointmentService
from clinic_booking.services.availability_service import (
    AvailabilityService,
    BookedSlotPoller,
    database_fetcher,
)

# Security
security = HTTPBearer(auto_error=False)


@lru_cache
def get_clock() -> Clock:
    """Clock in the configured clinic time zone."""
    return Clock(settings.clinic_timezone)


@lru_cache
def get_booked_slot_poller() -> BookedSlotPoller:
    """Process-wide booked-slot poller."""
    return BookedSlotPoller(
        database_fetcher(AsyncSessionLocal),
        interval_seconds=settings.availability_refresh_seconds,
    )


async def get_current_staff(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> dict[str, Any]:
    """
    Validate the staff session token.

    Args:
        credentials: Bearer token credentials

    Returns:
        Decoded token payload

    Raises:
        HTTPException: If the token is missing, invalid or expired
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)

    if payload is None or payload.get("role") != STAFF_ROLE:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


def get_appointment_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> AppointmentService:
    """Appointment store bound to the request session."""
    return AppointmentService(db, clock)


def get_availability_service(
    poller: Annotated[BookedSlotPoller, Depends(get_booked_slot_poller)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> AvailabilityService:
    """Availability service over the shared poller."""
    return AvailabilityService(poller, clock)


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentStaff = Annotated[dict, Depends(get_current_staff)]
AppointmentServiceDep = Annotated[AppointmentService, Depends(get_appointment_service)]
AvailabilityServiceDep = Annotated[AvailabilityService, Depends(get_availability_service)]
ClockDep = Annotated[Clock, Depends(get_clock)]
