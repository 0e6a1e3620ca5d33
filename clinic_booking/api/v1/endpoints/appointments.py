"""Appointment endpoints."""

from datetime import UTC, datetime
from uuid import UUID

from fastapi import APIRouter, Query, status

from clinic_booking.dependencies import (
    AppointmentServiceDep,
    AvailabilityServiceDep,
    ClockDep,
    CurrentStaff,
)
from clinic_booking.schemas.appointments import (
    AppointmentCreate,
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentStatus,
    AppointmentStatusUpdate,
    AppointmentViewsResponse,
    BulkDeleteResponse,
    DashboardTab,
    NotifyPatientResponse,
)
from clinic_booking.scheduling.slots import format_date_key
from clinic_booking.services.appointment_views import (
    count_by_status,
    done_latest_first,
    filter_by_tab,
    pending_soonest_first,
    todays_pending,
)
from clinic_booking.services.booking_flow import submit_booking
from clinic_booking.services.notification_service import NotificationService

router = APIRouter()


@router.post(
    "/",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["Appointments"],
    summary="Book an appointment",
)
async def create_appointment(
    data: AppointmentCreate,
    service: AppointmentServiceDep,
    availability: AvailabilityServiceDep,
) -> AppointmentResponse:
    """
    Book an appointment. The stored status is always Pending.

    Args:
        data: Appointment creation data
        service: Appointment service
        availability: Availability service for the slot check

    Returns:
        Created appointment

    Raises:
        SlotTakenException: If a Pending appointment already holds the slot
    """
    return await submit_booking(data, service, availability)


@router.get(
    "/",
    response_model=AppointmentListResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="List appointments",
)
async def list_appointments(
    staff: CurrentStaff,
    service: AppointmentServiceDep,
    tab: DashboardTab = Query(DashboardTab.ALL),
) -> AppointmentListResponse:
    """
    List appointments, newest first, filtered by dashboard tab.

    Counts always cover every appointment regardless of the tab.
    """
    fetched_at = datetime.now(UTC)
    items = await service.list_appointments()

    return AppointmentListResponse(
        tab=tab,
        counts=count_by_status(items),
        fetched_at=fetched_at,
        items=filter_by_tab(items, tab),
    )


@router.get(
    "/views",
    response_model=AppointmentViewsResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Dashboard views",
)
async def get_appointment_views(
    staff: CurrentStaff,
    service: AppointmentServiceDep,
    clock: ClockDep,
) -> AppointmentViewsResponse:
    """Pending soonest first, done latest first, and today's pending."""
    fetched_at = datetime.now(UTC)
    items = await service.list_appointments()
    today = clock.today()

    return AppointmentViewsResponse(
        today=format_date_key(today),
        fetched_at=fetched_at,
        pending=pending_soonest_first(items),
        done=done_latest_first(items),
        today_pending=todays_pending(items, today),
    )


@router.delete(
    "/done",
    response_model=BulkDeleteResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Delete completed appointments",
)
async def delete_done_appointments(
    staff: CurrentStaff,
    service: AppointmentServiceDep,
) -> BulkDeleteResponse:
    """Delete every appointment whose status is Done."""
    deleted = await service.delete_appointments_by_status(AppointmentStatus.DONE)
    return BulkDeleteResponse(deleted=deleted)


@router.delete(
    "/",
    response_model=BulkDeleteResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Delete all appointments",
)
async def delete_all_appointments(
    staff: CurrentStaff,
    service: AppointmentServiceDep,
) -> BulkDeleteResponse:
    """Delete every appointment."""
    deleted = await service.delete_all_appointments()
    return BulkDeleteResponse(deleted=deleted)


@router.get(
    "/{appointment_id}",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Get appointment by ID",
)
async def get_appointment(
    appointment_id: UUID,
    staff: CurrentStaff,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """
    Get a specific appointment by ID.

    Raises:
        NotFoundException: If appointment not found
    """
    return await service.get_appointment(appointment_id)


@router.patch(
    "/{appointment_id}/status",
    response_model=AppointmentResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Update appointment status",
)
async def update_appointment_status(
    appointment_id: UUID,
    data: AppointmentStatusUpdate,
    staff: CurrentStaff,
    service: AppointmentServiceDep,
) -> AppointmentResponse:
    """
    Update appointment status (mark done, no-show, or reopen).

    Args:
        appointment_id: Appointment ID
        data: Status update data
        staff: Authenticated staff session
        service: Appointment service

    Returns:
        Updated appointment
    """
    return await service.update_appointment_status(appointment_id, data.status)


@router.delete(
    "/{appointment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    tags=["Appointments"],
    summary="Delete appointment",
)
async def delete_appointment(
    appointment_id: UUID,
    staff: CurrentStaff,
    service: AppointmentServiceDep,
) -> None:
    """
    Permanently delete an appointment.

    Raises:
        NotFoundException: If appointment not found
    """
    await service.delete_appointment(appointment_id)


@router.post(
    "/{appointment_id}/notify",
    response_model=NotifyPatientResponse,
    status_code=status.HTTP_200_OK,
    tags=["Appointments"],
    summary="Remind patient",
)
async def notify_patient(
    appointment_id: UUID,
    staff: CurrentStaff,
    service: AppointmentServiceDep,
) -> NotifyPatientResponse:
    """Send a reminder to the patient. Delivery is not implemented; it is logged."""
    appointment = await service.get_appointment(appointment_id)
    return NotificationService.notify_patient(appointment)
