"""Tests for the appointment store."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.core.clock import FixedClock
from clinic_booking.core.exceptions import (
    BookingDateOutOfRangeException,
    InvalidSlotException,
    InvalidStatusTransitionException,
    NotFoundException,
    SlotTakenException,
    StorageError,
)
from clinic_booking.schemas.appointments import AppointmentCreate, AppointmentStatus
from clinic_booking.services.appointment_service import AppointmentService


def make_booking(booking_data: dict, **overrides) -> AppointmentCreate:
    return AppointmentCreate(**{**booking_data, **overrides})


def failing_session() -> MagicMock:
    """Session whose every statement fails like an unreachable database."""
    session = MagicMock(spec=AsyncSession)
    session.execute = AsyncMock(
        side_effect=OperationalError("SELECT 1", {}, Exception("connection refused"))
    )
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.mark.asyncio
async def test_create_forces_pending(
    appointment_service: AppointmentService,
    booking_data: dict,
) -> None:
    """Created appointments are Pending whatever the caller sent."""
    created = await appointment_service.create_appointment(
        make_booking(booking_data, status="Done")
    )

    assert created.status == AppointmentStatus.PENDING
    assert created.appointment_date == "10/06/2024"
    assert created.appointment_time == "9:00"
    assert created.patient_name == "Maria Lopez"
    assert created.service == "Tooth pain"
    assert created.created_at == created.booked_at


@pytest.mark.asyncio
async def test_create_then_list_round_trip(
    appointment_service: AppointmentService,
    booking_data: dict,
) -> None:
    """A created appointment is listed exactly once with its fields."""
    created = await appointment_service.create_appointment(make_booking(booking_data))

    listed = await appointment_service.list_appointments()

    assert len(listed) == 1
    assert listed[0].id == created.id
    assert listed[0].status == AppointmentStatus.PENDING
    assert listed[0].email == "maria@example.com"
    assert listed[0].special_notes == "Sensitive to cold"
    assert listed[0].insurance == "DentalCare Plus"


@pytest.mark.asyncio
async def test_create_fills_optional_fields(
    appointment_service: AppointmentService,
    booking_data: dict,
) -> None:
    """Missing optional fields are stored as empty text."""
    data = {**booking_data, "email": None, "special_notes": None, "insurance": None}

    created = await appointment_service.create_appointment(make_booking(data))

    assert created.email == ""
    assert created.special_notes == ""
    assert created.insurance == ""


@pytest.mark.asyncio
async def test_list_newest_first(
    appointment_service: AppointmentService,
    booking_data: dict,
) -> None:
    """List is ordered by creation time, most recent first."""
    first = await appointment_service.create_appointment(make_booking(booking_data))
    second = await appointment_service.create_appointment(
        make_booking(booking_data, appointment_time="10:00")
    )

    listed = await appointment_service.list_appointments()

    assert [a.id for a in listed] == [second.id, first.id]


@pytest.mark.asyncio
async def test_create_rejects_out_of_range_date(
    appointment_service: AppointmentService,
    booking_data: dict,
) -> None:
    """Dates past the horizon or before today are refused."""
    with pytest.raises(BookingDateOutOfRangeException):
        await appointment_service.create_appointment(
            make_booking(booking_data, appointment_date="2024-07-10")
        )
    with pytest.raises(BookingDateOutOfRangeException):
        await appointment_service.create_appointment(
            make_booking(booking_data, appointment_date="2024-06-08")
        )


@pytest.mark.asyncio
async def test_create_rejects_slot_outside_hours(
    appointment_service: AppointmentService,
    booking_data: dict,
) -> None:
    """Times must be generated slots for the weekday."""
    with pytest.raises(InvalidSlotException):
        await appointment_service.create_appointment(
            make_booking(booking_data, appointment_time="8:30")
        )
    with pytest.raises(InvalidSlotException):
        await appointment_service.create_appointment(
            make_booking(booking_data, appointment_time="9:15")
        )
    # Sunday opens at 13:00
    with pytest.raises(InvalidSlotException):
        await appointment_service.create_appointment(
            make_booking(booking_data, appointment_date="2024-06-16", appointment_time="9:00")
        )


@pytest.mark.asyncio
async def test_create_rejects_elapsed_slot(
    db_session: AsyncSession,
    booking_data: dict,
) -> None:
    """A slot that already started cannot be booked."""
    service = AppointmentService(db_session, FixedClock(datetime(2024, 6, 10, 10, 0)))

    with pytest.raises(InvalidSlotException):
        await service.create_appointment(make_booking(booking_data, appointment_time="9:30"))


@pytest.mark.asyncio
async def test_double_booking_allowed_by_default(
    appointment_service: AppointmentService,
    booking_data: dict,
) -> None:
    """Without prevention, two Pending records may share a slot."""
    await appointment_service.create_appointment(make_booking(booking_data))
    await appointment_service.create_appointment(make_booking(booking_data))

    listed = await appointment_service.list_appointments()

    assert len(listed) == 2
    assert {(a.appointment_date, a.appointment_time) for a in listed} == {("10/06/2024", "9:00")}


@pytest.mark.asyncio
async def test_double_booking_prevention(
    db_session: AsyncSession,
    clock: FixedClock,
    booking_data: dict,
) -> None:
    """With prevention on, a Pending record blocks a second booking until it is done."""
    service = AppointmentService(db_session, clock, prevent_double_booking=True)
    first = await service.create_appointment(make_booking(booking_data))

    with pytest.raises(SlotTakenException):
        await service.create_appointment(make_booking(booking_data))

    await service.update_appointment_status(first.id, AppointmentStatus.DONE)
    second = await service.create_appointment(make_booking(booking_data))
    assert second.status == AppointmentStatus.PENDING


@pytest.mark.asyncio
async def test_update_status_is_permissive(
    appointment_service: AppointmentService,
    booking_data: dict,
) -> None:
    """Any status can be set from any other by default."""
    created = await appointment_service.create_appointment(make_booking(booking_data))

    done = await appointment_service.update_appointment_status(created.id, AppointmentStatus.DONE)
    assert done.status == AppointmentStatus.DONE
    assert done.updated_at >= created.updated_at

    no_show = await appointment_service.update_appointment_status(
        created.id, AppointmentStatus.NO_SHOW
    )
    assert no_show.status == AppointmentStatus.NO_SHOW

    fetched = await appointment_service.get_appointment(created.id)
    assert fetched.status == AppointmentStatus.NO_SHOW


@pytest.mark.asyncio
async def test_enforced_transitions(
    db_session: AsyncSession,
    clock: FixedClock,
    booking_data: dict,
) -> None:
    """With enforcement, only the dashboard edges are accepted."""
    service = AppointmentService(db_session, clock, enforce_status_transitions=True)
    created = await service.create_appointment(make_booking(booking_data))

    await service.update_appointment_status(created.id, AppointmentStatus.DONE)

    with pytest.raises(InvalidStatusTransitionException):
        await service.update_appointment_status(created.id, AppointmentStatus.NO_SHOW)

    reopened = await service.update_appointment_status(created.id, AppointmentStatus.PENDING)
    assert reopened.status == AppointmentStatus.PENDING

    no_show = await service.update_appointment_status(created.id, AppointmentStatus.NO_SHOW)
    assert no_show.status == AppointmentStatus.NO_SHOW


@pytest.mark.asyncio
async def test_update_status_missing_appointment(
    appointment_service: AppointmentService,
) -> None:
    """Updating an unknown id raises NotFoundException."""
    with pytest.raises(NotFoundException):
        await appointment_service.update_appointment_status(uuid4(), AppointmentStatus.DONE)


@pytest.mark.asyncio
async def test_delete_appointment(
    appointment_service: AppointmentService,
    booking_data: dict,
) -> None:
    """Deleting removes the record; deleting again is NotFound."""
    created = await appointment_service.create_appointment(make_booking(booking_data))

    await appointment_service.delete_appointment(created.id)

    assert await appointment_service.list_appointments() == []
    with pytest.raises(NotFoundException):
        await appointment_service.delete_appointment(created.id)
    with pytest.raises(NotFoundException):
        await appointment_service.get_appointment(created.id)


@pytest.mark.asyncio
async def test_delete_all(
    appointment_service: AppointmentService,
    booking_data: dict,
) -> None:
    """Delete all followed by list returns nothing."""
    for time in ("9:00", "9:30", "10:00"):
        await appointment_service.create_appointment(
            make_booking(booking_data, appointment_time=time)
        )

    deleted = await appointment_service.delete_all_appointments()

    assert deleted == 3
    assert await appointment_service.list_appointments() == []


@pytest.mark.asyncio
async def test_delete_done_only(
    appointment_service: AppointmentService,
    booking_data: dict,
) -> None:
    """Deleting Done records leaves Pending and no-show records alone."""
    pending = await appointment_service.create_appointment(
        make_booking(booking_data, appointment_time="9:00")
    )
    done = await appointment_service.create_appointment(
        make_booking(booking_data, appointment_time="9:30")
    )
    no_show = await appointment_service.create_appointment(
        make_booking(booking_data, appointment_time="10:00")
    )
    await appointment_service.update_appointment_status(done.id, AppointmentStatus.DONE)
    await appointment_service.update_appointment_status(no_show.id, AppointmentStatus.NO_SHOW)

    deleted = await appointment_service.delete_appointments_by_status(AppointmentStatus.DONE)

    remaining = {a.id: a.status for a in await appointment_service.list_appointments()}
    assert deleted == 1
    assert remaining == {
        pending.id: AppointmentStatus.PENDING,
        no_show.id: AppointmentStatus.NO_SHOW,
    }


@pytest.mark.asyncio
async def test_list_fails_open(clock: FixedClock) -> None:
    """A failed read yields an empty list instead of an error."""
    session = failing_session()
    service = AppointmentService(session, clock)

    assert await service.list_appointments() == []
    session.rollback.assert_awaited()


@pytest.mark.asyncio
async def test_fetch_raises_storage_error(clock: FixedClock) -> None:
    """The strict fetch surfaces read failures."""
    service = AppointmentService(failing_session(), clock)

    with pytest.raises(StorageError):
        await service.fetch_appointments()


@pytest.mark.asyncio
async def test_write_failures_raise_storage_error(clock: FixedClock, booking_data: dict) -> None:
    """Insert, update and delete failures are reported to the caller."""
    session = failing_session()
    service = AppointmentService(session, clock)

    with pytest.raises(StorageError):
        await service.create_appointment(make_booking(booking_data))
    with pytest.raises(StorageError):
        await service.update_appointment_status(uuid4(), AppointmentStatus.DONE)
    with pytest.raises(StorageError):
        await service.delete_appointment(uuid4())
    with pytest.raises(StorageError):
        await service.delete_all_appointments()

    session.commit.assert_not_awaited()
