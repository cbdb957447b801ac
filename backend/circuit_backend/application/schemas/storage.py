"""Pydantic DTOs for stored files."""

from datetime import datetime

from pydantic import BaseModel


class StoredFileResponse(BaseModel):
    """A stored file; ``path`` is relative to the caller's storage area."""

    path: str
    name: str
    size: int
    content_type: str
    url: str
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class FileUrlResponse(BaseModel):
    path: str
    url: str
