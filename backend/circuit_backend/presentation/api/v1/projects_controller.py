"""Projects API controller — CRUD over the caller's projects."""

from typing import Any

from fastapi import APIRouter, Depends, status

from circuit_backend.application.schemas import (
    ApiResponse,
    CircuitResponse,
    ProjectCreate,
    ProjectDuplicate,
    ProjectResponse,
    ProjectUpdate,
)
from circuit_backend.application.services import CircuitService, ProjectService
from circuit_backend.domain.entities import Project
from circuit_backend.infrastructure.dependencies import get_circuit_service, get_project_service
from circuit_backend.presentation.api.caller import get_current_caller

router = APIRouter(prefix="/projects", tags=["Projects"])

# request attribute → document field
_UPDATE_FIELDS = {
    "name": "name",
    "description": "description",
    "status": "status",
    "settings": "settings",
    "tags": "tags",
}


def _to_response(project: Project) -> ProjectResponse:
    return ProjectResponse.model_validate(project, from_attributes=True)


def _update_fields(data: ProjectUpdate) -> dict[str, Any]:
    return {
        _UPDATE_FIELDS[key]: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None
    }


@router.get("", response_model=ApiResponse[list[ProjectResponse]])
async def list_projects(
    caller_id: str = Depends(get_current_caller),
    service: ProjectService = Depends(get_project_service),
) -> ApiResponse[list[ProjectResponse]]:
    """List every project owned by the caller."""
    projects = await service.list_owned(caller_id)
    return ApiResponse.ok(
        "Projects retrieved successfully", [_to_response(p) for p in projects]
    )


@router.post(
    "",
    response_model=ApiResponse[ProjectResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_project(
    data: ProjectCreate,
    caller_id: str = Depends(get_current_caller),
    service: ProjectService = Depends(get_project_service),
) -> ApiResponse[ProjectResponse]:
    project_id = await service.create(
        caller_id,
        Project(
            name=data.name,
            description=data.description,
            status=data.status,
            settings=data.settings,
            tags=data.tags,
        ),
    )
    project = await service.get(caller_id, project_id)
    return ApiResponse.ok("Project created successfully", _to_response(project))


@router.get("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def get_project(
    project_id: str,
    caller_id: str = Depends(get_current_caller),
    service: ProjectService = Depends(get_project_service),
) -> ApiResponse[ProjectResponse]:
    project = await service.get(caller_id, project_id)
    return ApiResponse.ok("Project retrieved successfully", _to_response(project))


@router.put("/{project_id}", response_model=ApiResponse[ProjectResponse])
async def update_project(
    project_id: str,
    data: ProjectUpdate,
    caller_id: str = Depends(get_current_caller),
    service: ProjectService = Depends(get_project_service),
) -> ApiResponse[ProjectResponse]:
    project = await service.update(caller_id, project_id, _update_fields(data))
    return ApiResponse.ok("Project updated successfully", _to_response(project))


@router.delete("/{project_id}", response_model=ApiResponse[None])
async def delete_project(
    project_id: str,
    caller_id: str = Depends(get_current_caller),
    service: ProjectService = Depends(get_project_service),
) -> ApiResponse[None]:
    """Delete a project. Its circuits are not deleted and become inaccessible."""
    await service.delete(caller_id, project_id)
    return ApiResponse.ok("Project deleted successfully")


@router.post(
    "/{project_id}/duplicate",
    response_model=ApiResponse[ProjectResponse],
    status_code=status.HTTP_201_CREATED,
)
async def duplicate_project(
    project_id: str,
    data: ProjectDuplicate | None = None,
    caller_id: str = Depends(get_current_caller),
    service: ProjectService = Depends(get_project_service),
) -> ApiResponse[ProjectResponse]:
    new_id = await service.duplicate(caller_id, project_id, data.name if data else None)
    project = await service.get(caller_id, new_id)
    return ApiResponse.ok("Project duplicated successfully", _to_response(project))


@router.get("/{project_id}/circuits", response_model=ApiResponse[list[CircuitResponse]])
async def list_project_circuits(
    project_id: str,
    caller_id: str = Depends(get_current_caller),
    circuits: CircuitService = Depends(get_circuit_service),
) -> ApiResponse[list[CircuitResponse]]:
    """List the circuits of a project the caller owns."""
    records = await circuits.list_by_parent(caller_id, project_id)
    return ApiResponse.ok(
        "Circuits retrieved successfully",
        [CircuitResponse.model_validate(c, from_attributes=True) for c in records],
    )
