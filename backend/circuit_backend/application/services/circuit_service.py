"""Application service (use case) for Circuit operations."""

from collections.abc import Mapping
from typing import Any

from circuit_backend.application.interfaces import Document, DocumentStore
from circuit_backend.application.services.owned_record_service import (
    COMMON_UPDATE_FIELDS,
    DEFAULT_MAX_NAME_LENGTH,
    PAYLOAD,
    OwnedRecordService,
)
from circuit_backend.application.services.project_service import ProjectService
from circuit_backend.application.services.template_service import TemplateService
from circuit_backend.domain.entities import Circuit
from circuit_backend.domain.exceptions import ValidationError


class CircuitService(OwnedRecordService[Circuit]):
    """Circuits live inside projects; access requires owning both the circuit and its project."""

    collection = "circuits"
    entity_type = "Circuit"
    updatable_fields = COMMON_UPDATE_FIELDS | {PAYLOAD, "isTemplate"}

    def __init__(
        self,
        store: DocumentStore,
        projects: ProjectService,
        templates: TemplateService | None = None,
        *,
        max_name_length: int = DEFAULT_MAX_NAME_LENGTH,
    ):
        super().__init__(store, parent=projects, max_name_length=max_name_length)
        self._templates = templates or TemplateService()

    def _extra_fields(self, record: Circuit) -> Document:
        return {"isTemplate": bool(record.is_template)}

    def _build(self, common: dict[str, Any], document: Document) -> Circuit:
        if common["payload"] is None:
            common["payload"] = {}
        return Circuit(**common, is_template=bool(document.get("isTemplate", False)))

    def _validate_fields(self, fields: Mapping[str, Any]) -> None:
        super()._validate_fields(fields)
        if "isTemplate" in fields and not isinstance(fields["isTemplate"], bool):
            raise ValidationError("isTemplate must be a boolean", field="isTemplate")

    async def create_from_template(
        self,
        caller_id: str,
        project_id: str,
        template_id: str,
        name: str,
        description: str = "",
    ) -> str:
        """Create a circuit in the project, seeded with a template's diagram."""
        self._validate_name(name)
        payload = self._templates.get_template_payload(template_id)
        circuit = Circuit(
            name=name,
            description=description,
            parent_id=project_id,
            payload=payload,
        )
        return await self.create(caller_id, circuit)
