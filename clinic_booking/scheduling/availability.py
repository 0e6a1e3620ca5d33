"""
Availability engine.

Pure functions over an immutable snapshot of appointments and an injected
"now". A slot is offerable when it starts strictly after now and no Pending
appointment holds the same (date key, time label) pair; Done and no-show
appointments free their slot.
"""

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from types import MappingProxyType
from typing import Protocol

from clinic_booking.core.exceptions import BookingDateOutOfRangeException
from clinic_booking.scheduling.slots import (
    format_date_key,
    generate_slots,
    normalize_date_key,
    normalize_time_label,
    slot_datetime,
)
from clinic_booking.schemas.appointments import AppointmentStatus

DEFAULT_HORIZON_DAYS = 30

BookedIndex = Mapping[str, frozenset[str]]


class SlotHolder(Protocol):
    """Anything carrying the stored slot and status of an appointment."""

    appointment_date: str
    appointment_time: str
    status: AppointmentStatus


@dataclass(frozen=True)
class SlotAvailability:
    """One generated slot and whether it can be offered."""

    time: str
    available: bool
    booked: bool


def build_booked_index(appointments: Iterable[SlotHolder]) -> BookedIndex:
    """
    Group Pending appointments by date key, then by time label.

    The result is read-only and derived entirely from its input; rebuild it
    from a fresh snapshot instead of mutating it.
    """
    grouped: dict[str, set[str]] = defaultdict(set)
    for appointment in appointments:
        if appointment.status != AppointmentStatus.PENDING:
            continue
        try:
            time_label = normalize_time_label(appointment.appointment_time)
        except ValueError:
            time_label = appointment.appointment_time
        grouped[normalize_date_key(appointment.appointment_date)].add(time_label)

    return MappingProxyType({key: frozenset(times) for key, times in grouped.items()})


def is_slot_booked(day: date, time: str, booked_index: BookedIndex) -> bool:
    """Check whether a Pending appointment holds the slot."""
    booked_times = booked_index.get(format_date_key(day), frozenset())
    return normalize_time_label(time) in booked_times


def is_slot_available(
    day: date,
    time: str,
    booked_index: BookedIndex,
    now: datetime,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> bool:
    """
    Check whether a slot can be offered.

    Args:
        day: Calendar day of the slot
        time: Slot label
        booked_index: Index from ``build_booked_index``
        now: Current naive local wall-clock time
        horizon_days: How many days ahead bookings are taken

    Returns:
        True if the time is one of the day's generated slots, starts after
        ``now`` and is not held by a Pending appointment

    Raises:
        BookingDateOutOfRangeException: If the day is outside the horizon
    """
    validate_booking_date(day, now.date(), horizon_days)

    try:
        label = normalize_time_label(time)
    except ValueError:
        return False
    if label not in generate_slots(day):
        return False
    if slot_datetime(day, label) <= now:
        return False
    return not is_slot_booked(day, label, booked_index)


def validate_booking_date(
    day: date,
    today: date,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> None:
    """
    Ensure a day lies between today and the booking horizon, inclusive.

    Raises:
        BookingDateOutOfRangeException: If the day is in the past or too far
            ahead
    """
    if day < today:
        raise BookingDateOutOfRangeException(
            f"{format_date_key(day)} is in the past",
        )

    last_day = today + timedelta(days=horizon_days)
    if day > last_day:
        raise BookingDateOutOfRangeException(
            f"{format_date_key(day)} is more than {horizon_days} days ahead",
        )


def list_slots(
    day: date,
    booked_index: BookedIndex,
    now: datetime,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> list[SlotAvailability]:
    """
    List every generated slot on a day with its availability.

    Raises:
        BookingDateOutOfRangeException: If the day is outside the horizon
    """
    validate_booking_date(day, now.date(), horizon_days)

    slots = []
    for time in generate_slots(day):
        booked = is_slot_booked(day, time, booked_index)
        slots.append(
            SlotAvailability(
                time=time,
                available=not booked and slot_datetime(day, time) > now,
                booked=booked,
            )
        )
    return slots


def list_available_slots(
    day: date,
    booked_index: BookedIndex,
    now: datetime,
    horizon_days: int = DEFAULT_HORIZON_DAYS,
) -> list[str]:
    """Ordered labels of the offerable slots on a day."""
    return [
        slot.time for slot in list_slots(day, booked_index, now, horizon_days) if slot.available
    ]
