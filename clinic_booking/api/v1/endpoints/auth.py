"""Staff authentication endpoints."""

from fastapi import APIRouter, status

from clinic_booking.dependencies import CurrentStaff
from clinic_booking.schemas.auth import StaffLoginRequest, StaffToken
from clinic_booking.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/staff/login",
    response_model=StaffToken,
    status_code=status.HTTP_200_OK,
    tags=["Authentication"],
    summary="Staff login",
)
async def staff_login(data: StaffLoginRequest) -> StaffToken:
    """
    Log in to the staff dashboard.

    Args:
        data: Staff credentials and remember-device choice

    Returns:
        Bearer token for the dashboard endpoints
    """
    return AuthService.login_staff(data)


@router.get(
    "/staff/session",
    status_code=status.HTTP_200_OK,
    tags=["Authentication"],
    summary="Check staff session",
)
async def staff_session(staff: CurrentStaff) -> dict[str, object]:
    """Report whether the presented token is a valid staff session."""
    return {
        "authenticated": True,
        "username": staff["sub"],
        "remember_device": bool(staff.get("remember_device", False)),
    }
