"""Appointment service for business logic."""

from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_booking.config import settings
from clinic_booking.core.clock import Clock
from clinic_booking.core.exceptions import (
    InvalidSlotException,
    InvalidStatusTransitionException,
    NotFoundException,
    SlotTakenException,
    StorageError,
)
from clinic_booking.models.appointments import appointments
from clinic_booking.scheduling.availability import validate_booking_date
from clinic_booking.scheduling.slots import format_date_key, generate_slots, slot_datetime
from clinic_booking.schemas.appointments import (
    DEFAULT_SERVICE,
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStatus,
)

logger = structlog.get_logger(__name__)

# Status changes offered on the staff dashboard
ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.DONE, AppointmentStatus.NO_SHOW}),
    AppointmentStatus.DONE: frozenset({AppointmentStatus.PENDING}),
    AppointmentStatus.NO_SHOW: frozenset({AppointmentStatus.PENDING}),
}


class AppointmentService:
    """Service for managing appointments."""

    def __init__(
        self,
        db: AsyncSession,
        clock: Clock | None = None,
        *,
        horizon_days: int | None = None,
        enforce_status_transitions: bool | None = None,
        prevent_double_booking: bool | None = None,
    ):
        """Initialize service with database session and clock."""
        self.db = db
        self.clock = clock or Clock(settings.clinic_timezone)
        self.horizon_days = (
            settings.booking_horizon_days if horizon_days is None else horizon_days
        )
        self.enforce_status_transitions = (
            settings.enforce_status_transitions
            if enforce_status_transitions is None
            else enforce_status_transitions
        )
        self.prevent_double_booking = (
            settings.prevent_double_booking
            if prevent_double_booking is None
            else prevent_double_booking
        )

    async def create_appointment(self, data: AppointmentCreate) -> AppointmentResponse:
        """
        Create a new Pending appointment.

        Whatever status the caller sent is ignored.

        Args:
            data: Appointment creation data

        Returns:
            Created appointment

        Raises:
            BookingDateOutOfRangeException: If the date is outside the horizon
            InvalidSlotException: If the time is not offered or already passed
            SlotTakenException: If double-booking prevention is on and the
                slot is held
            StorageError: If the insert fails
        """
        now = self.clock.now()
        day = data.appointment_date
        validate_booking_date(day, now.date(), self.horizon_days)

        if data.appointment_time not in generate_slots(day):
            raise InvalidSlotException(
                f"{data.appointment_time} is not offered on {format_date_key(day)}"
            )
        if slot_datetime(day, data.appointment_time) <= now:
            raise InvalidSlotException("Time slot has already passed")

        date_key = format_date_key(day)
        if self.prevent_double_booking and await self._slot_is_held(
            date_key, data.appointment_time
        ):
            raise SlotTakenException()

        timestamp = datetime.now(UTC)
        values: dict[str, Any] = {
            "id": uuid4(),
            "patient_name": data.patient_name,
            "email": data.email or "",
            "phone": data.phone,
            "service": data.service or data.dental_concern or DEFAULT_SERVICE,
            "appointment_date": date_key,
            "appointment_time": data.appointment_time,
            "status": AppointmentStatus.PENDING.value,
            "date_of_birth": data.date_of_birth,
            "dental_concern": data.dental_concern,
            "patient_type": data.patient_type.value,
            "special_notes": data.special_notes or "",
            "insurance": data.insurance or "",
            "created_at": timestamp,
            "updated_at": timestamp,
            "booked_at": timestamp,
        }

        stmt = insert(appointments).values(**values).returning(appointments)
        try:
            result = await self.db.execute(stmt)
            row = result.fetchone()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "appointment_create_failed",
                appointment_date=date_key,
                appointment_time=data.appointment_time,
                error=str(e),
            )
            raise StorageError("Failed to save appointment") from e

        logger.info(
            "appointment_created",
            appointment_id=str(values["id"]),
            appointment_date=date_key,
            appointment_time=data.appointment_time,
        )
        return AppointmentResponse.model_validate(dict(row._mapping))

    async def fetch_appointments(self) -> list[AppointmentResponse]:
        """
        Fetch all appointments, most recently created first.

        Raises:
            StorageError: If the query fails
        """
        stmt = select(appointments).order_by(appointments.c.created_at.desc())
        try:
            result = await self.db.execute(stmt)
            rows = result.fetchall()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("appointments_fetch_failed", error=str(e))
            raise StorageError("Failed to load appointments") from e

        return [AppointmentResponse.model_validate(dict(row._mapping)) for row in rows]

    async def list_appointments(self) -> list[AppointmentResponse]:
        """
        List all appointments, most recently created first.

        Read failures are logged and yield an empty list.
        """
        try:
            return await self.fetch_appointments()
        except StorageError:
            return []

    async def get_appointment(self, appointment_id: UUID) -> AppointmentResponse:
        """
        Get appointment by ID.

        Raises:
            NotFoundException: If appointment not found
            StorageError: If the query fails
        """
        stmt = select(appointments).where(appointments.c.id == appointment_id)
        try:
            result = await self.db.execute(stmt)
            row = result.fetchone()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("appointment_fetch_failed", appointment_id=str(appointment_id), error=str(e))
            raise StorageError("Failed to load appointment") from e

        if not row:
            raise NotFoundException("Appointment not found")

        return AppointmentResponse.model_validate(dict(row._mapping))

    async def update_appointment_status(
        self,
        appointment_id: UUID,
        status: AppointmentStatus,
    ) -> AppointmentResponse:
        """
        Update appointment status.

        Any status may be set from any other unless transition enforcement is
        enabled, in which case only the dashboard edges are accepted.

        Args:
            appointment_id: Appointment ID
            status: New status

        Returns:
            Updated appointment

        Raises:
            NotFoundException: If appointment not found
            InvalidStatusTransitionException: If enforcement rejects the change
            StorageError: If the update fails
        """
        if self.enforce_status_transitions:
            current = await self.get_appointment(appointment_id)
            if current.status != status and status not in ALLOWED_TRANSITIONS[current.status]:
                raise InvalidStatusTransitionException(
                    f"Cannot change status from {current.status.value!r} to {status.value!r}"
                )

        stmt = (
            update(appointments)
            .where(appointments.c.id == appointment_id)
            .values(status=status.value, updated_at=datetime.now(UTC))
            .returning(appointments)
        )
        try:
            result = await self.db.execute(stmt)
            row = result.fetchone()
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(
                "appointment_status_update_failed",
                appointment_id=str(appointment_id),
                error=str(e),
            )
            raise StorageError("Failed to update appointment status") from e

        if not row:
            raise NotFoundException("Appointment not found")

        logger.info(
            "appointment_status_updated",
            appointment_id=str(appointment_id),
            status=status.value,
        )
        return AppointmentResponse.model_validate(dict(row._mapping))

    async def delete_appointment(self, appointment_id: UUID) -> None:
        """
        Permanently delete one appointment.

        Raises:
            NotFoundException: If appointment not found
            StorageError: If the delete fails
        """
        stmt = delete(appointments).where(appointments.c.id == appointment_id)
        deleted = await self._execute_delete(stmt, "appointment_delete_failed")

        if deleted == 0:
            raise NotFoundException("Appointment not found")

        logger.info("appointment_deleted", appointment_id=str(appointment_id))

    async def delete_all_appointments(self) -> int:
        """Delete every appointment and return how many were removed."""
        stmt = delete(appointments).where(appointments.c.id.is_not(None))
        deleted = await self._execute_delete(stmt, "appointments_clear_failed")

        logger.info("appointments_cleared", deleted=deleted)
        return deleted

    async def delete_appointments_by_status(self, status: AppointmentStatus) -> int:
        """Delete every appointment with the given status and return the count."""
        stmt = delete(appointments).where(appointments.c.status == status.value)
        deleted = await self._execute_delete(stmt, "appointments_bulk_delete_failed")

        logger.info("appointments_deleted_by_status", status=status.value, deleted=deleted)
        return deleted

    async def _execute_delete(self, stmt: Any, failure_event: str) -> int:
        """Run a delete statement, commit, and return the affected row count."""
        try:
            result = await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(failure_event, error=str(e))
            raise StorageError("Failed to delete appointments") from e

        return result.rowcount or 0

    async def _slot_is_held(self, date_key: str, time_label: str) -> bool:
        """Check for a Pending appointment at the exact slot."""
        stmt = (
            select(appointments.c.id)
            .where(
                and_(
                    appointments.c.appointment_date == date_key,
                    appointments.c.appointment_time == time_label,
                    appointments.c.status == AppointmentStatus.PENDING.value,
                )
            )
            .limit(1)
        )
        try:
            result = await self.db.execute(stmt)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("slot_check_failed", error=str(e))
            raise StorageError("Failed to check slot availability") from e

        return result.first() is not None
