"""Booked-slot polling and the availability service."""

import asyncio
import contextlib
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, date, datetime
from functools import cached_property

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clinic_booking.config import settings
from clinic_booking.core.clock import Clock
from clinic_booking.core.exceptions import StorageError
from clinic_booking.scheduling.availability import (
    BookedIndex,
    build_booked_index,
    is_slot_available,
    list_slots,
)
from clinic_booking.scheduling.slots import format_date_key, parse_time_label
from clinic_booking.schemas.appointments import AppointmentResponse
from clinic_booking.schemas.availability import AvailabilityResponse, SlotResponse
from clinic_booking.services.appointment_service import AppointmentService

logger = structlog.get_logger(__name__)

AppointmentFetcher = Callable[[], Awaitable[Sequence[AppointmentResponse]]]


@dataclass(frozen=True)
class BookingSnapshot:
    """Appointments as seen by one refresh."""

    appointments: tuple[AppointmentResponse, ...]
    fetched_at: datetime
    degraded: bool = False
    error: str | None = None

    @cached_property
    def booked_index(self) -> BookedIndex:
        """Pending slots grouped by date key."""
        return build_booked_index(self.appointments)


class BookedSlotPoller:
    """
    Keeps the latest booking snapshot fresh by polling.

    The snapshot is replaced, never mutated, on each refresh. A failed fetch
    yields an empty, degraded snapshot so every future slot stays offerable.
    """

    def __init__(self, fetch: AppointmentFetcher, interval_seconds: float = 10.0):
        """Initialize poller with a fetch coroutine and refresh interval."""
        self._fetch = fetch
        self.interval_seconds = interval_seconds
        self._snapshot: BookingSnapshot | None = None
        self._refreshed_at = 0.0
        self._lock = asyncio.Lock()
        self._task: asyncio.Task | None = None

    @property
    def snapshot(self) -> BookingSnapshot | None:
        """Latest snapshot, if any refresh has completed."""
        return self._snapshot

    @property
    def is_running(self) -> bool:
        """Whether the background refresh loop is active."""
        return self._task is not None and not self._task.done()

    def is_stale(self) -> bool:
        """Check whether the snapshot is missing or older than the interval."""
        if self._snapshot is None:
            return True
        return time.monotonic() - self._refreshed_at >= self.interval_seconds

    async def refresh(self) -> BookingSnapshot:
        """Fetch appointments and replace the snapshot."""
        async with self._lock:
            try:
                appointments = await self._fetch()
            except (StorageError, SQLAlchemyError, OSError) as e:
                logger.error("booked_slots_refresh_failed", error=str(e))
                snapshot = BookingSnapshot(
                    appointments=(),
                    fetched_at=datetime.now(UTC),
                    degraded=True,
                    error=str(e),
                )
            else:
                snapshot = BookingSnapshot(
                    appointments=tuple(appointments),
                    fetched_at=datetime.now(UTC),
                )

            self._snapshot = snapshot
            self._refreshed_at = time.monotonic()
            return snapshot

    async def get_snapshot(self, force_refresh: bool = False) -> BookingSnapshot:
        """Return the current snapshot, refreshing it first when needed."""
        if force_refresh or self.is_stale():
            return await self.refresh()
        return self._snapshot  # type: ignore[return-value]

    def start(self) -> None:
        """Start the background refresh loop."""
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info("booked_slot_poller_started", interval_seconds=self.interval_seconds)

    async def stop(self) -> None:
        """Stop the background refresh loop."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("booked_slot_poller_stopped")

    async def _run(self) -> None:
        while True:
            try:
                await self.refresh()
            except Exception:
                logger.exception("booked_slot_poller_iteration_failed")
            await asyncio.sleep(self.interval_seconds)


def database_fetcher(session_factory: async_sessionmaker[AsyncSession]) -> AppointmentFetcher:
    """Build a fetcher that reads appointments through a fresh session."""

    async def fetch() -> list[AppointmentResponse]:
        async with session_factory() as session:
            return await AppointmentService(session).fetch_appointments()

    return fetch


def format_display_time(label: str) -> str:
    """Render a slot label on a 12-hour clock, e.g. ``1:30 PM``."""
    hour, minute = parse_time_label(label)
    suffix = "PM" if hour >= 12 else "AM"
    display_hour = hour - 12 if hour > 12 else hour or 12
    return f"{display_hour}:{minute:02d} {suffix}"


class AvailabilityService:
    """Service answering slot availability questions."""

    def __init__(
        self,
        poller: BookedSlotPoller,
        clock: Clock,
        horizon_days: int | None = None,
    ):
        """Initialize service with a snapshot poller and clock."""
        self.poller = poller
        self.clock = clock
        self.horizon_days = (
            settings.booking_horizon_days if horizon_days is None else horizon_days
        )

    async def get_day_availability(
        self,
        day: date,
        refresh: bool = False,
    ) -> AvailabilityResponse:
        """
        List every slot on a day with its availability.

        Args:
            day: Requested calendar day
            refresh: Force a fresh fetch instead of using the cached snapshot

        Returns:
            Slots and snapshot metadata

        Raises:
            BookingDateOutOfRangeException: If the day is outside the horizon
        """
        snapshot = await self.poller.get_snapshot(force_refresh=refresh)
        slots = list_slots(day, snapshot.booked_index, self.clock.now(), self.horizon_days)

        return AvailabilityResponse(
            date=day,
            date_key=format_date_key(day),
            weekday=day.strftime("%A"),
            slots=[
                SlotResponse(
                    time=slot.time,
                    display_time=format_display_time(slot.time),
                    available=slot.available,
                    booked=slot.booked,
                )
                for slot in slots
            ],
            available_times=[slot.time for slot in slots if slot.available],
            fetched_at=snapshot.fetched_at,
            degraded=snapshot.degraded,
            refresh_interval_seconds=self.poller.interval_seconds,
        )

    async def is_available(self, day: date, time_label: str, refresh: bool = False) -> bool:
        """
        Check one slot against the latest snapshot.

        Raises:
            BookingDateOutOfRangeException: If the day is outside the horizon
        """
        snapshot = await self.poller.get_snapshot(force_refresh=refresh)
        return is_slot_available(
            day,
            time_label,
            snapshot.booked_index,
            self.clock.now(),
            self.horizon_days,
        )
