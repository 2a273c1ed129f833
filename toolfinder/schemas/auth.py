"""
Pydantic schemas for authentication endpoints.

These models define the strict request/response contracts for
register / login / logout / status.
"""

import re
from typing import Optional

from pydantic import Field, field_validator

from toolfinder.schemas.base import CamelModel

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"

_PASSWORD_COMPLEXITY = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


# --- Requests ---

class RegisterRequest(CamelModel):
    """
    Request to create a new account.

    Username: 3-30 characters, letters, numbers and underscores only.
    Password: at least 6 characters with one lowercase letter, one uppercase
    letter and one number.
    """
    username: str = Field(
        ...,
        min_length=3,
        max_length=30,
        pattern=USERNAME_PATTERN,
        description="Unique username",
        examples=["thesis_writer"]
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Account password",
        examples=["Secret123"]
    )

    @field_validator("password")
    @classmethod
    def password_complexity(cls, value: str) -> str:
        if not _PASSWORD_COMPLEXITY.match(value):
            raise ValueError(
                "Password must contain at least one uppercase letter, "
                "one lowercase letter, and one number"
            )
        return value


class LoginRequest(CamelModel):
    """Request to start a session."""
    username: str = Field(..., min_length=1, max_length=30, description="Username")
    password: str = Field(..., min_length=1, max_length=128, description="Password")


# --- Responses ---

class UserSummary(CamelModel):
    """Minimal user identity."""
    id: int = Field(..., description="User id")
    username: str = Field(..., description="Username")


class LoginUser(UserSummary):
    """User identity returned after login."""
    has_api_key: bool = Field(..., description="Whether a Gemini API key is stored")


class RegisterResponse(CamelModel):
    """Response for POST /api/auth/register."""
    success: bool = True
    user: UserSummary
    message: str = "User registered successfully"


class LoginResponse(CamelModel):
    """Response for POST /api/auth/login."""
    success: bool = True
    user: LoginUser
    message: str = "Login successful"


class AuthStatusResponse(CamelModel):
    """
    Response for GET /api/auth/status.

    `user` is omitted when the caller is not authenticated.
    """
    authenticated: bool = Field(..., description="Whether a valid session cookie was sent")
    user: Optional[UserSummary] = Field(None, description="Session identity, if authenticated")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"authenticated": True, "user": {"id": 1, "username": "thesis_writer"}},
                {"authenticated": False},
            ]
        }
    }
