"""Appointment schemas for request/response validation."""

import re
from datetime import date, datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from clinic_booking.scheduling.slots import normalize_time_label, parse_date_key

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_SERVICE = "General Consultation"


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    PENDING = "Pending"
    DONE = "Done"
    NO_SHOW = "Didn't show up"


class PatientType(str, Enum):
    """Whether the patient has visited before."""

    NEW = "new"
    RETURNING = "returning"


class DashboardTab(str, Enum):
    """Status filter tabs on the staff dashboard."""

    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"
    NO_SHOW = "no-show"


class PatientInfo(BaseModel):
    """Patient details collected in the second booking step."""

    patient_name: str = Field(..., min_length=1, max_length=200)
    email: str | None = Field(None, max_length=254)
    phone: str = Field(..., min_length=1, max_length=30)
    date_of_birth: str = Field(..., min_length=1, max_length=20)
    dental_concern: str = Field(..., min_length=1, max_length=200)
    patient_type: PatientType = PatientType.NEW
    special_notes: str | None = Field(None, max_length=2000)
    insurance: str | None = Field(None, max_length=500)

    @field_validator("patient_name", "dental_concern")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        """Reject whitespace-only values."""
        if not v.strip():
            raise ValueError("Field is required")
        return v.strip()

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str | None) -> str | None:
        """Email is optional but must look like an address when given."""
        if v is None or not v.strip():
            return None
        if not EMAIL_PATTERN.match(v.strip()):
            raise ValueError("Please enter a valid email address")
        return v.strip()

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        """Validate phone number format."""
        cleaned = (
            v.replace("-", "").replace(" ", "").replace("(", "").replace(")", "").replace("+", "")
        )
        if not cleaned.isdigit():
            raise ValueError("Phone number must contain only digits and separators")
        if len(cleaned) < 10:
            raise ValueError("Phone number must have at least 10 digits")
        return v.strip()

    @field_validator("date_of_birth")
    @classmethod
    def validate_age_or_birth_date(cls, v: str) -> str:
        """Accept an age (1-120) or a calendar date of birth."""
        value = v.strip()
        if value.isdigit():
            if not 1 <= int(value) <= 120:
                raise ValueError("Please enter a valid age (1-120)")
            return value
        if parse_date_key(value) is None:
            raise ValueError("Please enter a valid age (1-120)")
        return value


class AppointmentCreate(PatientInfo):
    """Schema for creating a new appointment."""

    appointment_date: date
    appointment_time: str
    service: str | None = Field(None, max_length=200)
    # Accepted for client compatibility, always replaced by Pending
    status: AppointmentStatus | None = None

    @field_validator("appointment_date", mode="before")
    @classmethod
    def parse_appointment_date(cls, v: Any) -> Any:
        """Accept the stored DD/MM/YYYY form as well as ISO dates."""
        if isinstance(v, str):
            parsed = parse_date_key(v)
            if parsed is None:
                raise ValueError("Date must be DD/MM/YYYY or YYYY-MM-DD")
            return parsed
        return v

    @field_validator("appointment_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Normalize the slot label to H:MM."""
        return normalize_time_label(v)


class AppointmentStatusUpdate(BaseModel):
    """Schema for updating appointment status."""

    status: AppointmentStatus


class AppointmentResponse(BaseModel):
    """Schema for appointment response."""

    id: UUID
    patient_name: str
    email: str
    phone: str
    service: str
    appointment_date: str
    appointment_time: str
    status: AppointmentStatus
    date_of_birth: str
    dental_concern: str
    patient_type: PatientType
    special_notes: str
    insurance: str
    created_at: datetime
    updated_at: datetime
    booked_at: datetime

    model_config = {"from_attributes": True}


class AppointmentCounts(BaseModel):
    """Per-status totals shown on the dashboard header."""

    total: int
    pending: int
    done: int
    no_show: int


class AppointmentListResponse(BaseModel):
    """Schema for appointment list response."""

    tab: DashboardTab
    counts: AppointmentCounts
    fetched_at: datetime
    items: list[AppointmentResponse]


class AppointmentViewsResponse(BaseModel):
    """Derived staff views over the current appointments."""

    today: str
    fetched_at: datetime
    pending: list[AppointmentResponse]
    done: list[AppointmentResponse]
    today_pending: list[AppointmentResponse]


class BulkDeleteResponse(BaseModel):
    """Result of a bulk delete."""

    deleted: int


class NotifyPatientResponse(BaseModel):
    """Result of the reminder stub."""

    appointment_id: UUID
    sent: bool
    message: str
