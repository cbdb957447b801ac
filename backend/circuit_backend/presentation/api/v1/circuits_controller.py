"""Circuits API controller — circuits inside the caller's projects, plus templates."""

from typing import Any

from fastapi import APIRouter, Depends, status

from circuit_backend.application.schemas import (
    ApiResponse,
    CircuitCreate,
    CircuitFromTemplate,
    CircuitResponse,
    CircuitTemplateResponse,
    CircuitUpdate,
)
from circuit_backend.application.services import CircuitService, TemplateService
from circuit_backend.domain.entities import Circuit
from circuit_backend.infrastructure.dependencies import get_circuit_service, get_template_service
from circuit_backend.presentation.api.caller import get_current_caller

router = APIRouter(prefix="/circuits", tags=["Circuits"])

# request attribute → document field
_UPDATE_FIELDS = {
    "name": "name",
    "description": "description",
    "payload": "payload",
    "tags": "tags",
    "is_template": "isTemplate",
}


def _to_response(circuit: Circuit) -> CircuitResponse:
    return CircuitResponse.model_validate(circuit, from_attributes=True)


def _update_fields(data: CircuitUpdate) -> dict[str, Any]:
    return {
        _UPDATE_FIELDS[key]: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None
    }


# ── Templates (declared before /{circuit_id}) ───────────────────────

@router.get("/templates", response_model=ApiResponse[list[CircuitTemplateResponse]])
async def list_templates(
    caller_id: str = Depends(get_current_caller),
    templates: TemplateService = Depends(get_template_service),
) -> ApiResponse[list[CircuitTemplateResponse]]:
    return ApiResponse.ok(
        "Templates retrieved successfully",
        [
            CircuitTemplateResponse.model_validate(t, from_attributes=True)
            for t in templates.list_templates()
        ],
    )


@router.post(
    "/from-template",
    response_model=ApiResponse[CircuitResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_from_template(
    data: CircuitFromTemplate,
    caller_id: str = Depends(get_current_caller),
    service: CircuitService = Depends(get_circuit_service),
) -> ApiResponse[CircuitResponse]:
    circuit_id = await service.create_from_template(
        caller_id,
        project_id=data.project_id,
        template_id=data.template_id,
        name=data.name,
        description=data.description,
    )
    circuit = await service.get(caller_id, circuit_id)
    return ApiResponse.ok("Circuit created from template successfully", _to_response(circuit))


# ── Circuits ────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=ApiResponse[CircuitResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_circuit(
    data: CircuitCreate,
    caller_id: str = Depends(get_current_caller),
    service: CircuitService = Depends(get_circuit_service),
) -> ApiResponse[CircuitResponse]:
    """Create a circuit in a project the caller owns. Version starts at 1."""
    circuit_id = await service.create(
        caller_id,
        Circuit(
            name=data.name,
            description=data.description,
            parent_id=data.project_id,
            payload=data.payload,
            tags=data.tags,
            is_template=data.is_template,
        ),
    )
    circuit = await service.get(caller_id, circuit_id)
    return ApiResponse.ok("Circuit created successfully", _to_response(circuit))


@router.get("/{circuit_id}", response_model=ApiResponse[CircuitResponse])
async def get_circuit(
    circuit_id: str,
    caller_id: str = Depends(get_current_caller),
    service: CircuitService = Depends(get_circuit_service),
) -> ApiResponse[CircuitResponse]:
    circuit = await service.get(caller_id, circuit_id)
    return ApiResponse.ok("Circuit retrieved successfully", _to_response(circuit))


@router.put("/{circuit_id}", response_model=ApiResponse[CircuitResponse])
async def update_circuit(
    circuit_id: str,
    data: CircuitUpdate,
    caller_id: str = Depends(get_current_caller),
    service: CircuitService = Depends(get_circuit_service),
) -> ApiResponse[CircuitResponse]:
    circuit = await service.update(caller_id, circuit_id, _update_fields(data))
    return ApiResponse.ok("Circuit updated successfully", _to_response(circuit))


@router.delete("/{circuit_id}", response_model=ApiResponse[None])
async def delete_circuit(
    circuit_id: str,
    caller_id: str = Depends(get_current_caller),
    service: CircuitService = Depends(get_circuit_service),
) -> ApiResponse[None]:
    await service.delete(caller_id, circuit_id)
    return ApiResponse.ok("Circuit deleted successfully")
