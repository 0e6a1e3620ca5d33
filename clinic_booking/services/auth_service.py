"""Staff authentication service."""

from datetime import UTC, datetime

import structlog

from clinic_booking.config import settings
from clinic_booking.core.exceptions import UnauthorizedException
from clinic_booking.core.security import (
    STAFF_ROLE,
    create_access_token,
    staff_session_lifetime,
    verify_staff_credentials,
)
from clinic_booking.schemas.auth import StaffLoginRequest, StaffToken

logger = structlog.get_logger(__name__)


class AuthService:
    """Service for staff sessions."""

    @staticmethod
    def login_staff(data: StaffLoginRequest) -> StaffToken:
        """
        Exchange staff credentials for a session token.

        A remembered device gets a long-lived token instead of a short one;
        forgetting the device is simply discarding the token.

        Raises:
            UnauthorizedException: If the credentials do not match
        """
        if not verify_staff_credentials(data.username, data.password):
            logger.warning("staff_login_failed", username=data.username)
            raise UnauthorizedException("Invalid username or password")

        lifetime = staff_session_lifetime(data.remember_device)
        token = create_access_token(
            {
                "sub": settings.staff_username,
                "role": STAFF_ROLE,
                "remember_device": data.remember_device,
            },
            expires_delta=lifetime,
        )

        logger.info("staff_login_succeeded", remember_device=data.remember_device)
        return StaffToken(
            access_token=token,
            expires_at=datetime.now(UTC) + lifetime,
            remember_device=data.remember_device,
        )
