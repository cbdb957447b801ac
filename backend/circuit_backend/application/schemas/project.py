"""Pydantic DTOs (Data Transfer Objects) for the Project feature."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ProjectStatus = Literal["active", "archived"]


class ProjectCreate(BaseModel):
    """Schema for creating a new project."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Power supply"])
    description: str = Field("", max_length=2000)
    status: ProjectStatus = "active"
    settings: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)


class ProjectUpdate(BaseModel):
    """Schema for updating a project — all fields optional."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    status: ProjectStatus | None = None
    settings: dict[str, Any] | None = None
    tags: list[str] | None = None


class ProjectDuplicate(BaseModel):
    """Optional name for the copy; defaults to '<name> (Copy)'."""

    name: str | None = Field(None, min_length=1, max_length=255)


class ProjectResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    name: str
    description: str
    owner_id: str
    status: str
    settings: dict[str, Any]
    tags: list[str]
    version: int
    created_at: datetime | None
    updated_at: datetime | None

    model_config = {"from_attributes": True}
