"""Authentication API schemas."""

from typing import Literal, Optional
from pydantic import EmailStr, Field, field_validator

from api.schemas.common import CamelModel, UTCDateTime
from database.models.users import UserRole


class RegisterRequest(CamelModel):
    """Account registration."""

    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=8, max_length=128)
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, max_length=200)
    role: Literal["candidate", "hr"] = "candidate"

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v: str) -> str:
        """Strip whitespace from the username."""
        if isinstance(v, str):
            return v.strip()
        return v


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=128)


class UserResponse(CamelModel):
    """Public view of an account."""

    id: str
    username: str
    role: UserRole
    email: Optional[str] = None
    full_name: Optional[str] = None
    created_at: UTCDateTime


class AuthResponse(CamelModel):
    user: UserResponse
    token: str = Field(description="Bearer access token")


class MeResponse(CamelModel):
    user: UserResponse


class InitDemoResponse(CamelModel):
    message: str
    created: list[str]
