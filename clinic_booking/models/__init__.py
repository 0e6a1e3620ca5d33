"""Database models."""

from clinic_booking.models.appointments import appointments, metadata

__all__ = [
    "appointments",
    "metadata",
]
