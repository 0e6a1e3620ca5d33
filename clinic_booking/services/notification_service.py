"""Patient reminder stub.

No message is delivered; the reminder is only logged.
"""

import structlog

from clinic_booking.schemas.appointments import AppointmentResponse, NotifyPatientResponse

logger = structlog.get_logger(__name__)


class NotificationService:
    """Service for patient reminders."""

    @staticmethod
    def notify_patient(appointment: AppointmentResponse) -> NotifyPatientResponse:
        """
        Record a reminder for an appointment.

        Args:
            appointment: Appointment to remind the patient about

        Returns:
            Reminder outcome shown to staff
        """
        contact = appointment.email or appointment.phone
        logger.info(
            "patient_reminder_requested",
            appointment_id=str(appointment.id),
            appointment_date=appointment.appointment_date,
            appointment_time=appointment.appointment_time,
            delivered=False,
        )
        return NotifyPatientResponse(
            appointment_id=appointment.id,
            sent=True,
            message=f"Reminder sent to {appointment.patient_name} at {contact}",
        )
