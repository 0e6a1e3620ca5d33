"""Tests for derived dashboard views."""

from datetime import date, datetime, timedelta
from uuid import uuid4

from clinic_booking.schemas.appointments import (
    AppointmentResponse,
    AppointmentStatus,
    DashboardTab,
)
from clinic_booking.services.appointment_views import (
    count_by_status,
    done_latest_first,
    filter_by_tab,
    pending_soonest_first,
    todays_pending,
)

BASE_TIME = datetime(2024, 6, 1, 8, 0)


def appointment(
    day: str,
    time: str,
    status: AppointmentStatus = AppointmentStatus.PENDING,
    created_offset: int = 0,
) -> AppointmentResponse:
    created = BASE_TIME + timedelta(minutes=created_offset)
    return AppointmentResponse(
        id=uuid4(),
        patient_name="Patient",
        email="",
        phone="5551234567",
        service="Checkup",
        appointment_date=day,
        appointment_time=time,
        status=status,
        date_of_birth="40",
        dental_concern="Checkup",
        patient_type="returning",
        special_notes="",
        insurance="",
        created_at=created,
        updated_at=created,
        booked_at=created,
    )


def test_pending_same_day_sorted_by_time() -> None:
    """09:30 comes before 14:00 on the same day."""
    later = appointment("05/06/2024", "14:00")
    earlier = appointment("05/06/2024", "09:30")

    assert pending_soonest_first([later, earlier]) == [earlier, later]


def test_pending_sorted_by_calendar_date_not_text() -> None:
    """Dates compare as days, so 30 June precedes 1 July."""
    july = appointment("01/07/2024", "9:00")
    june = appointment("30/06/2024", "18:30")
    early_june = appointment("02/06/2024", "13:00")

    assert pending_soonest_first([july, june, early_june]) == [early_june, june, july]


def test_pending_view_excludes_other_statuses() -> None:
    """Only Pending records appear in the pending view."""
    pending = appointment("05/06/2024", "10:00")
    done = appointment("04/06/2024", "10:00", AppointmentStatus.DONE)
    no_show = appointment("03/06/2024", "10:00", AppointmentStatus.NO_SHOW)

    assert pending_soonest_first([done, no_show, pending]) == [pending]


def test_unparsable_dates_sort_last() -> None:
    """Records with unreadable dates stay visible at the end."""
    broken = appointment("sometime", "9:00")
    valid = appointment("05/06/2024", "9:00")

    assert pending_soonest_first([broken, valid]) == [valid, broken]


def test_done_latest_first() -> None:
    """Done records are ordered by creation time, newest first."""
    older = appointment("05/06/2024", "9:00", AppointmentStatus.DONE, created_offset=0)
    newer = appointment("01/06/2024", "9:00", AppointmentStatus.DONE, created_offset=30)
    pending = appointment("05/06/2024", "9:30", created_offset=60)

    assert done_latest_first([older, pending, newer]) == [newer, older]


def test_todays_pending() -> None:
    """Today's view keeps Pending records on today's date, by time."""
    today = date(2024, 6, 10)
    afternoon = appointment("10/06/2024", "15:00")
    morning = appointment("10/06/2024", "9:30")
    tomorrow = appointment("11/06/2024", "9:00")
    done_today = appointment("10/06/2024", "10:00", AppointmentStatus.DONE)

    result = todays_pending([afternoon, tomorrow, morning, done_today], today)

    assert result == [morning, afternoon]


def test_todays_pending_normalizes_stored_dates() -> None:
    """Unpadded or ISO stored dates still match today."""
    today = date(2024, 6, 5)
    unpadded = appointment("5/6/2024", "11:00")
    iso = appointment("2024-06-05", "10:00")

    assert todays_pending([unpadded, iso], today) == [iso, unpadded]


def test_filter_by_tab_and_counts() -> None:
    """Tabs filter by status while counts cover everything."""
    pending = appointment("05/06/2024", "9:00")
    done = appointment("05/06/2024", "9:30", AppointmentStatus.DONE)
    no_show = appointment("05/06/2024", "10:00", AppointmentStatus.NO_SHOW)
    items = [pending, done, no_show]

    assert filter_by_tab(items, DashboardTab.ALL) == items
    assert filter_by_tab(items, DashboardTab.PENDING) == [pending]
    assert filter_by_tab(items, DashboardTab.COMPLETED) == [done]
    assert filter_by_tab(items, DashboardTab.NO_SHOW) == [no_show]

    counts = count_by_status(items)
    assert (counts.total, counts.pending, counts.done, counts.no_show) == (3, 1, 1, 1)
