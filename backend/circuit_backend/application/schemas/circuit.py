"""Pydantic DTOs for circuits and circuit templates."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class CircuitCreate(BaseModel):
    """Schema for creating a circuit inside a project."""

    project_id: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255, examples=["RC filter"])
    description: str = Field("", max_length=2000)
    payload: dict[str, Any] | None = Field(
        None, examples=[{"components": [], "connections": []}],
    )
    tags: list[str] = Field(default_factory=list)
    is_template: bool = False


class CircuitUpdate(BaseModel):
    """Schema for updating a circuit — all fields optional.

    Replacing ``payload`` increments the circuit's version.
    """

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    payload: dict[str, Any] | None = None
    tags: list[str] | None = None
    is_template: bool | None = None


class CircuitFromTemplate(BaseModel):
    project_id: str = Field(..., min_length=1, max_length=255)
    template_id: str = Field(..., min_length=1, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field("", max_length=2000)


class CircuitResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    project_id: str | None
    owner_id: str
    name: str
    description: str
    payload: dict[str, Any]
    version: int
    tags: list[str]
    is_template: bool
    created_at: datetime | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}


class CircuitTemplateResponse(BaseModel):
    id: str
    name: str
    description: str
    category: str
    payload: dict[str, Any]

    model_config = {"from_attributes": True}
