"""Availability schemas."""

from datetime import date, datetime

from pydantic import BaseModel


class SlotResponse(BaseModel):
    """A single half-hour slot on the requested day."""

    time: str
    display_time: str
    available: bool
    booked: bool


class AvailabilityResponse(BaseModel):
    """Slots for one day, computed from the latest booking snapshot."""

    date: date
    date_key: str
    weekday: str
    slots: list[SlotResponse]
    available_times: list[str]
    fetched_at: datetime
    degraded: bool
    refresh_interval_seconds: float


class SlotCheckResponse(BaseModel):
    """Availability of a single slot."""

    date: date
    time: str
    available: bool
