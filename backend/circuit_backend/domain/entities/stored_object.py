"""Domain entity describing a file held by the file storage backend."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class StoredObject:
    """A single stored file, addressed by its storage path."""

    path: str
    name: str
    size: int
    content_type: str
    url: str
    updated_at: datetime | None = None
