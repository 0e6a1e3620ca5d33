"""Availability endpoints."""

from datetime import date

from fastapi import APIRouter, Query, status

from clinic_booking.dependencies import AvailabilityServiceDep
from clinic_booking.schemas.availability import AvailabilityResponse, SlotCheckResponse

router = APIRouter()


@router.get(
    "/",
    response_model=AvailabilityResponse,
    status_code=status.HTTP_200_OK,
    tags=["Availability"],
    summary="Slots for a day",
)
async def get_availability(
    service: AvailabilityServiceDep,
    day: date = Query(..., alias="date", description="Day to list, YYYY-MM-DD"),
    refresh: bool = Query(False, description="Fetch bookings now instead of using the cache"),
) -> AvailabilityResponse:
    """
    List the half-hour slots for a day with their availability.

    Bookings are read from a snapshot refreshed every few seconds; pass
    ``refresh=true`` to fetch them immediately.

    Raises:
        BookingDateOutOfRangeException: If the day is in the past or beyond
            the booking horizon
    """
    return await service.get_day_availability(day, refresh=refresh)


@router.get(
    "/slot",
    response_model=SlotCheckResponse,
    status_code=status.HTTP_200_OK,
    tags=["Availability"],
    summary="Check one slot",
)
async def check_slot(
    service: AvailabilityServiceDep,
    day: date = Query(..., alias="date", description="Day of the slot, YYYY-MM-DD"),
    time: str = Query(..., description="Slot label, e.g. 9:30"),
    refresh: bool = Query(False, description="Fetch bookings now instead of using the cache"),
) -> SlotCheckResponse:
    """Whether a single slot can still be booked."""
    available = await service.is_available(day, time, refresh=refresh)
    return SlotCheckResponse(date=day, time=time, available=available)
