"""Pydantic schemas for account operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from taskflow.core.constants import MAX_PASSWORD_LENGTH, MIN_PASSWORD_LENGTH


class RegisterRequest(BaseModel):
    """Schema for account registration."""

    email: EmailStr
    password: str = Field(
        ..., min_length=MIN_PASSWORD_LENGTH, max_length=MAX_PASSWORD_LENGTH
    )

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Store emails in lower case so lookups are case-insensitive."""
        return v.lower()


class LoginRequest(BaseModel):
    """Schema for email/password login."""

    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Schema for user response data."""

    id: UUID
    email: EmailStr
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """Schema for authentication token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token expiration in seconds")
