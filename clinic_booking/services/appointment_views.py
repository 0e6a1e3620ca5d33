"""Derived dashboard views over listed appointments.

Nothing here is persisted; every view is recomputed from the latest list.
"""

from collections.abc import Iterable
from datetime import date

from clinic_booking.scheduling.slots import (
    format_date_key,
    normalize_date_key,
    parse_date_key,
    time_to_minutes,
)
from clinic_booking.schemas.appointments import (
    AppointmentCounts,
    AppointmentResponse,
    AppointmentStatus,
    DashboardTab,
)

TAB_STATUSES = {
    DashboardTab.PENDING: AppointmentStatus.PENDING,
    DashboardTab.COMPLETED: AppointmentStatus.DONE,
    DashboardTab.NO_SHOW: AppointmentStatus.NO_SHOW,
}


def _time_sort_key(appointment: AppointmentResponse) -> int:
    try:
        return time_to_minutes(appointment.appointment_time)
    except ValueError:
        return 24 * 60


def _slot_sort_key(appointment: AppointmentResponse) -> tuple[date, int]:
    # Unparsable dates sort after every real day
    day = parse_date_key(appointment.appointment_date) or date.max
    return day, _time_sort_key(appointment)


def pending_soonest_first(
    appointments: Iterable[AppointmentResponse],
) -> list[AppointmentResponse]:
    """Pending appointments by calendar date, then time of day."""
    pending = [a for a in appointments if a.status == AppointmentStatus.PENDING]
    return sorted(pending, key=_slot_sort_key)


def done_latest_first(appointments: Iterable[AppointmentResponse]) -> list[AppointmentResponse]:
    """Done appointments, most recently created first."""
    done = [a for a in appointments if a.status == AppointmentStatus.DONE]
    return sorted(done, key=lambda a: a.created_at, reverse=True)


def todays_pending(
    appointments: Iterable[AppointmentResponse],
    today: date,
) -> list[AppointmentResponse]:
    """Pending appointments on ``today``, by time of day."""
    today_key = format_date_key(today)
    matching = []
    for appointment in appointments:
        if appointment.status != AppointmentStatus.PENDING:
            continue
        # 5/6/2024 and 05/06/2024 compare equal
        if normalize_date_key(appointment.appointment_date) == today_key:
            matching.append(appointment)
    return sorted(matching, key=_time_sort_key)


def filter_by_tab(
    appointments: Iterable[AppointmentResponse],
    tab: DashboardTab,
) -> list[AppointmentResponse]:
    """Apply a dashboard tab filter, keeping the incoming order."""
    if tab == DashboardTab.ALL:
        return list(appointments)
    status = TAB_STATUSES[tab]
    return [a for a in appointments if a.status == status]


def count_by_status(appointments: Iterable[AppointmentResponse]) -> AppointmentCounts:
    """Totals per status for the dashboard header."""
    items = list(appointments)
    return AppointmentCounts(
        total=len(items),
        pending=sum(1 for a in items if a.status == AppointmentStatus.PENDING),
        done=sum(1 for a in items if a.status == AppointmentStatus.DONE),
        no_show=sum(1 for a in items if a.status == AppointmentStatus.NO_SHOW),
    )
