"""Authentication schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class StaffLoginRequest(BaseModel):
    """Staff dashboard login."""

    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=200)
    remember_device: bool = False


class StaffToken(BaseModel):
    """Staff session token response."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    remember_device: bool
