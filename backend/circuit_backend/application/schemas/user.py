"""Pydantic DTOs for registration and user profiles."""

from datetime import datetime

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """Schema for registering (or signing in) with an identity-provider ID token."""

    id_token: str = Field(..., min_length=1)
    provider: str | None = Field(None, max_length=50, examples=["google"])


class UserProfileUpdate(BaseModel):
    display_name: str | None = Field(None, max_length=255)
    photo_url: str | None = Field(None, max_length=2048)


class UserResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    email: str
    display_name: str
    photo_url: str
    provider: str
    created_at: datetime
    updated_at: datetime
    last_login_at: datetime | None

    model_config = {"from_attributes": True}
