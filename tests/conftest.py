import os
from collections.abc import AsyncGenerator
from datetime import datetime

# Tests never touch a configured database: point settings at SQLite first
os.environ["DATABASE_URL"] = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-jwt-secret-for-clinic-booking-tests")
os.environ["STAFF_USERNAME"] = "DENTIST"
os.environ["STAFF_PASSWORD"] = "DENTIST"
os.environ["ENFORCE_STATUS_TRANSITIONS"] = "false"
os.environ["PREVENT_DOUBLE_BOOKING"] = "false"
os.environ.setdefault("LOG_FORMAT", "console")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from clinic_booking.core.clock import FixedClock
from clinic_booking.core.security import STAFF_ROLE, create_access_token
from clinic_booking.database import get_db
from clinic_booking.dependencies import get_booked_slot_poller, get_clock
from clinic_booking.main import app
from clinic_booking.models.appointments import metadata
from clinic_booking.services.appointment_service import AppointmentService
from clinic_booking.services.availability_service import BookedSlotPoller, database_fetcher

# Sunday 9 June 2024, noon. The next day is a Monday.
FROZEN_NOW = datetime(2024, 6, 9, 12, 0)


@pytest.fixture
def clock() -> FixedClock:
    """Clock frozen at FROZEN_NOW."""
    return FixedClock(FROZEN_NOW)


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with the schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def appointment_service(db_session: AsyncSession, clock: FixedClock) -> AppointmentService:
    """Permissive appointment store on the test database."""
    return AppointmentService(
        db_session,
        clock,
        horizon_days=30,
        enforce_status_transitions=False,
        prevent_double_booking=False,
    )


@pytest.fixture
def poller(session_factory: async_sessionmaker[AsyncSession]) -> BookedSlotPoller:
    """Booked-slot poller reading the test database."""
    return BookedSlotPoller(database_fetcher(session_factory), interval_seconds=10)


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    clock: FixedClock,
    poller: BookedSlotPoller,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_booked_slot_poller] = lambda: poller

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def staff_headers() -> dict:
    """Authorization headers for the staff dashboard."""
    token = create_access_token({"sub": "DENTIST", "role": STAFF_ROLE})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def patient_info() -> dict:
    """Patient details as submitted in the booking form."""
    return {
        "patient_name": "Maria Lopez",
        "email": "maria@example.com",
        "phone": "555-123-4567",
        "date_of_birth": "34",
        "dental_concern": "Tooth pain",
        "patient_type": "new",
        "special_notes": "Sensitive to cold",
        "insurance": "DentalCare Plus",
    }


@pytest.fixture
def booking_data(patient_info: dict) -> dict:
    """Booking for Monday 10 June 2024 at 9:00."""
    return {
        **patient_info,
        "appointment_date": "2024-06-10",
        "appointment_time": "9:00",
    }
