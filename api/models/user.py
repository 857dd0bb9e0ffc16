"""
User Models
===========

Pydantic models for registration and login.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.security import MAX_PASSWORD_BYTES
from models import CamelModel


class UserCredentials(BaseModel):
    """Username and password, as sent to /register and /login."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "username": "alice",
                "password": "correct horse battery staple"
            }
        }
    )

    username: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Case-sensitive username"
    )
    password: str = Field(
        ...,
        min_length=1,
        description="Plain text password, at most 72 bytes in UTF-8"
    )

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        """Reject passwords bcrypt would silently truncate."""
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes in UTF-8")
        return value


class RegisterRequest(UserCredentials):
    """Request model for user registration."""
    pass


class LoginRequest(UserCredentials):
    """Request model for user login."""
    pass


class TokenResponse(CamelModel):
    """Response model for a successful login."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "tokenType": "bearer",
                "expiresIn": 3600
            }
        }
    )

    token: str = Field(..., description="Signed access token")
    token_type: str = Field(default="bearer", description="Authorization scheme to use")
    expires_in: int = Field(..., description="Token lifetime in seconds")
