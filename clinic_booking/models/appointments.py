"""Appointments table model using SQLAlchemy Core."""

from sqlalchemy import (
    VARCHAR,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    MetaData,
    Table,
    Text,
    Uuid,
)

# Metadata for all tables
metadata = MetaData()

# Appointments table
appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True),
    # Patient
    Column("patient_name", Text, nullable=False),
    Column("email", Text, nullable=False, server_default=""),
    Column("phone", VARCHAR(30), nullable=False),
    Column("date_of_birth", Text, nullable=False),
    Column("patient_type", Text, nullable=False, server_default="new"),
    # Appointment details (date is DD/MM/YYYY text, time is an H:MM slot label)
    Column("service", Text, nullable=False),
    Column("dental_concern", Text, nullable=False),
    Column("appointment_date", Text, nullable=False),
    Column("appointment_time", Text, nullable=False),
    # Status management
    Column(
        "status",
        Text,
        nullable=False,
        server_default="Pending",
    ),
    # Free text
    Column("special_notes", Text, nullable=False, server_default=""),
    Column("insurance", Text, nullable=False, server_default=""),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Column("booked_at", DateTime(timezone=True), nullable=False),
    # Constraints
    CheckConstraint(
        "status IN ('Pending', 'Done', 'Didn''t show up')",
        name="appointments_status_check",
    ),
    CheckConstraint(
        "patient_type IN ('new', 'returning')",
        name="appointments_patient_type_check",
    ),
    Index("ix_appointments_slot", "appointment_date", "appointment_time"),
    Index("ix_appointments_status", "status"),
    Index("ix_appointments_created_at", "created_at"),
)
