"""Caller identity and auth session models."""

from enum import Enum

from pydantic import BaseModel, Field


class CallerIdentity(BaseModel):
    """The signed-in end user invoking an operation."""

    user_id: str = Field(..., description="Identity provider user id", min_length=1)
    email: str | None = Field(None, description="Email address, when known")


class AuthSession(BaseModel):
    """Session issued by the identity provider on sign in."""

    access_token: str
    refresh_token: str | None = None
    expires_in: int | None = None
    token_type: str = "bearer"
    user: CallerIdentity | None = None


class StaffRole(str, Enum):
    """Roles allowed to manage orders and menus."""

    VENDOR = "vendor"
    COURIER = "courier"


class StaffIdentity(BaseModel):
    """A vendor or delivery partner authenticated by API key."""

    staff_id: str = Field(..., description="Stable identifier of the staff member", min_length=1)
    role: StaffRole
