"""Application service (use case) for Project operations."""

import logging
from collections.abc import Mapping
from typing import Any

from circuit_backend.application.interfaces import Document, DocumentStore
from circuit_backend.application.services.owned_record_service import (
    COMMON_UPDATE_FIELDS,
    DEFAULT_MAX_NAME_LENGTH,
    OwnedRecordService,
)
from circuit_backend.domain.entities import Project
from circuit_backend.domain.exceptions import ValidationError

logger = logging.getLogger(__name__)

PROJECT_STATUSES = frozenset({"active", "archived"})


class ProjectService(OwnedRecordService[Project]):
    """Projects are top-level records owned directly by a user."""

    collection = "projects"
    entity_type = "Project"
    updatable_fields = COMMON_UPDATE_FIELDS | {"status", "settings"}

    def __init__(
        self,
        store: DocumentStore,
        *,
        max_name_length: int = DEFAULT_MAX_NAME_LENGTH,
    ):
        super().__init__(store, max_name_length=max_name_length)

    def _extra_fields(self, record: Project) -> Document:
        return {
            "status": record.status or "active",
            "settings": dict(record.settings or {}),
        }

    def _build(self, common: dict[str, Any], document: Document) -> Project:
        settings = document.get("settings")
        return Project(
            **common,
            status=document.get("status") or "active",
            settings=settings if isinstance(settings, dict) else {},
        )

    def _validate_fields(self, fields: Mapping[str, Any]) -> None:
        super()._validate_fields(fields)
        if "status" in fields and fields["status"] not in PROJECT_STATUSES:
            raise ValidationError(
                f"status must be one of: {', '.join(sorted(PROJECT_STATUSES))}",
                field="status",
            )
        if "settings" in fields and not isinstance(fields["settings"], dict):
            raise ValidationError("settings must be a mapping", field="settings")

    async def create(self, caller_id: str, record: Project) -> str:
        self._validate_fields({"status": record.status, "settings": record.settings})
        return await super().create(caller_id, record)

    async def duplicate(
        self, caller_id: str, project_id: str, name: str | None = None
    ) -> str:
        """Copy a project the caller owns into a new project. Circuits are not copied."""
        original = await self.get(caller_id, project_id)
        copy = Project(
            name=name or f"{original.name} (Copy)",
            description=original.description,
            settings=dict(original.settings),
            tags=list(original.tags),
        )
        new_id = await self.create(caller_id, copy)
        logger.info("Duplicated project %s as %s", project_id, new_id)
        return new_id
