"""Create appointments table.

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "appointments",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("patient_name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), server_default="", nullable=False),
        sa.Column("phone", sa.VARCHAR(length=30), nullable=False),
        sa.Column("date_of_birth", sa.Text(), nullable=False),
        sa.Column("patient_type", sa.Text(), server_default="new", nullable=False),
        sa.Column("service", sa.Text(), nullable=False),
        sa.Column("dental_concern", sa.Text(), nullable=False),
        sa.Column("appointment_date", sa.Text(), nullable=False),
        sa.Column("appointment_time", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), server_default="Pending", nullable=False),
        sa.Column("special_notes", sa.Text(), server_default="", nullable=False),
        sa.Column("insurance", sa.Text(), server_default="", nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("booked_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "status IN ('Pending', 'Done', 'Didn''t show up')",
            name="appointments_status_check",
        ),
        sa.CheckConstraint(
            "patient_type IN ('new', 'returning')",
            name="appointments_patient_type_check",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Create indexes
    op.create_index(
        "ix_appointments_slot", "appointments", ["appointment_date", "appointment_time"]
    )
    op.create_index("ix_appointments_status", "appointments", ["status"])
    op.create_index("ix_appointments_created_at", "appointments", ["created_at"])


def downgrade() -> None:
    """Downgrade database schema."""
    # Drop indexes
    op.drop_index("ix_appointments_created_at", table_name="appointments")
    op.drop_index("ix_appointments_status", table_name="appointments")
    op.drop_index("ix_appointments_slot", table_name="appointments")

    # Drop table
    op.drop_table("appointments")
