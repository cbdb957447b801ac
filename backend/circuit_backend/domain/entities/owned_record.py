"""Domain entities — records owned by a single caller (projects and circuits)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class OwnedRecord:
    """Fields shared by every ownership-scoped record.

    ``id``, ``owner_id``, ``parent_id`` and ``created_at`` are fixed once the
    record is stored. ``version`` starts at 1 and only moves when the
    payload is replaced.
    """

    name: str
    owner_id: str = ""
    id: str | None = None
    parent_id: str | None = None
    description: str = ""
    payload: dict[str, Any] | None = None
    version: int = 1
    tags: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class Project(OwnedRecord):
    """A circuit design project — the top-level container owned by a user."""

    status: str = "active"
    settings: dict[str, Any] = field(default_factory=dict)


@dataclass
class Circuit(OwnedRecord):
    """A circuit diagram inside a project. ``payload`` holds the diagram graph."""

    is_template: bool = False

    @property
    def project_id(self) -> str | None:
        return self.parent_id
