"""Three-step patient booking flow.

1. Pick a date and an available slot.
2. Provide patient information.
3. Confirm, which is the only step that writes to the store.

The confirmation step carries a one-shot "save attempted" guard so the same
form cannot be submitted twice while a save is in flight or after it
succeeded. A reported storage failure re-opens the guard once, giving the
patient exactly one retry. A rejected slot re-opens it and sends the patient
back to slot selection with their details kept.
"""

from datetime import date
from enum import Enum

import structlog

from clinic_booking.core.exceptions import (
    AppException,
    BookingDateOutOfRangeException,
    InvalidSlotException,
    SlotTakenException,
    StorageError,
)
from clinic_booking.scheduling.availability import BookedIndex, is_slot_available
from clinic_booking.scheduling.slots import (
    format_date_key,
    generate_slots,
    normalize_time_label,
    slot_datetime,
)
from clinic_booking.schemas.appointments import (
    AppointmentCreate,
    AppointmentResponse,
    PatientInfo,
)
from clinic_booking.services.appointment_service import AppointmentService
from clinic_booking.services.availability_service import AvailabilityService

logger = structlog.get_logger(__name__)

SLOT_REJECTIONS = (BookingDateOutOfRangeException, InvalidSlotException, SlotTakenException)


class BookingStep(str, Enum):
    """Where the patient is in the flow."""

    SELECT_SLOT = "select_slot"
    PATIENT_INFO = "patient_info"
    CONFIRM = "confirm"
    COMPLETED = "completed"


class BookingFlowError(AppException):
    """Step called out of order."""

    def __init__(self, message: str = "Booking step is not available"):
        super().__init__(message, status_code=400)


class DuplicateSubmissionError(AppException):
    """Confirmation already attempted for this form."""

    def __init__(self, message: str = "Booking has already been submitted"):
        super().__init__(message, status_code=409)


class BookingFlow:
    """In-memory state of one patient's booking form."""

    def __init__(self, service: AppointmentService):
        self.service = service
        self.max_retries = 1
        self._reset()

    def _reset(self) -> None:
        self.day: date | None = None
        self.time: str | None = None
        self.patient_info: PatientInfo | None = None
        self.requested_service: str | None = None
        self.save_attempted = False
        self.retries_used = 0
        self.result: AppointmentResponse | None = None
        self.step = BookingStep.SELECT_SLOT

    def select_slot(self, day: date, time: str, booked_index: BookedIndex) -> None:
        """
        Choose a slot; it must be available in the caller's current index.

        Raises:
            BookingDateOutOfRangeException: If the day is outside the horizon
            InvalidSlotException: If the time is not offered or already passed
            SlotTakenException: If a Pending appointment holds the slot
        """
        if self.step == BookingStep.COMPLETED:
            raise BookingFlowError("Booking is already completed")

        try:
            label = normalize_time_label(time)
        except ValueError as e:
            raise InvalidSlotException(f"{time!r} is not a time slot") from e

        now = self.service.clock.now()
        if not is_slot_available(day, label, booked_index, now, self.service.horizon_days):
            key = format_date_key(day)
            if label in generate_slots(day) and slot_datetime(day, label) > now:
                raise SlotTakenException(f"{label} on {key} is already booked")
            raise InvalidSlotException(f"{label} on {key} is not available")

        self.day = day
        self.time = label
        self.step = BookingStep.PATIENT_INFO

    def submit_patient_info(self, info: PatientInfo, service: str | None = None) -> None:
        """Store validated patient details and move to confirmation."""
        if self.day is None or self.time is None:
            raise BookingFlowError("Select a date and time first")
        if self.step == BookingStep.COMPLETED:
            raise BookingFlowError("Booking is already completed")

        self.patient_info = info
        self.requested_service = service
        self.step = BookingStep.CONFIRM

    def back(self) -> None:
        """Return to the previous step, keeping entered data."""
        if self.step == BookingStep.CONFIRM:
            self.step = BookingStep.PATIENT_INFO
        elif self.step == BookingStep.PATIENT_INFO:
            self.step = BookingStep.SELECT_SLOT

    def cancel(self) -> None:
        """Close the flow and discard everything entered."""
        self._reset()

    async def confirm(self) -> AppointmentResponse:
        """
        Save the booking.

        Returns:
            The stored appointment

        Raises:
            BookingFlowError: If earlier steps are incomplete
            DuplicateSubmissionError: If a save was already attempted
            StorageError: If the store fails the write
            BookingDateOutOfRangeException, InvalidSlotException,
                SlotTakenException: If the store rejects the slot; the flow
                returns to slot selection
        """
        if self.step != BookingStep.CONFIRM or self.patient_info is None:
            raise BookingFlowError("Complete the previous steps first")
        if self.save_attempted:
            raise DuplicateSubmissionError()

        self.save_attempted = True
        data = AppointmentCreate(
            **self.patient_info.model_dump(),
            appointment_date=self.day,
            appointment_time=self.time,
            service=self.requested_service,
        )

        try:
            self.result = await self.service.create_appointment(data)
        except StorageError:
            if self.retries_used < self.max_retries:
                self.retries_used += 1
                self.save_attempted = False
            logger.warning(
                "booking_save_failed",
                appointment_date=format_date_key(data.appointment_date),
                appointment_time=data.appointment_time,
                retry_allowed=not self.save_attempted,
            )
            raise
        except SLOT_REJECTIONS as e:
            logger.info(
                "booking_slot_rejected",
                appointment_date=format_date_key(data.appointment_date),
                appointment_time=data.appointment_time,
                reason=e.message,
            )
            self.save_attempted = False
            self.time = None
            self.step = BookingStep.SELECT_SLOT
            raise
        except AppException:
            self.save_attempted = False
            raise

        self.step = BookingStep.COMPLETED
        return self.result


async def submit_booking(
    data: AppointmentCreate,
    store: AppointmentService,
    availability: AvailabilityService,
) -> AppointmentResponse:
    """
    Run a complete booking request through the flow in one go.

    The slot is checked against freshly fetched bookings before the write,
    so a slot already held by a Pending appointment is refused.
    """
    snapshot = await availability.poller.get_snapshot(force_refresh=True)

    flow = BookingFlow(store)
    flow.select_slot(data.appointment_date, data.appointment_time, snapshot.booked_index)
    flow.submit_patient_info(
        PatientInfo(**data.model_dump(include=set(PatientInfo.model_fields))),
        service=data.service,
    )
    return await flow.confirm()
