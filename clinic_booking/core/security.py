"""Staff credential checks and session tokens."""

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from clinic_booking.config import settings

STAFF_ROLE = "staff"


def verify_staff_credentials(username: str, password: str) -> bool:
    """Compare submitted credentials with the configured staff login."""
    username_ok = secrets.compare_digest(username.encode(), settings.staff_username.encode())
    password_ok = secrets.compare_digest(password.encode(), settings.staff_password.encode())
    return username_ok and password_ok


def staff_session_lifetime(remember_device: bool) -> timedelta:
    """Lifetime of a staff session token."""
    if remember_device:
        return timedelta(days=settings.remember_device_expire_days)
    return timedelta(minutes=settings.access_token_expire_minutes)


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Payload data to encode
        expires_delta: Optional expiration time delta

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update(
        {
            "exp": expire,
            "iat": datetime.now(UTC),
            "type": "access",
        }
    )

    encoded_jwt = jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )

    return encoded_jwt


def decode_access_token(token: str) -> dict[str, Any] | None:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token to decode

    Returns:
        Decoded payload or None if invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )

        # Verify token type
        if payload.get("type") != "access":
            return None

        return payload
    except JWTError:
        return None
