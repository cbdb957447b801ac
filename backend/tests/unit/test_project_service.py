"""Unit tests for project-specific behaviour of the ProjectService."""

import pytest

from circuit_backend.application.services import CircuitService, ProjectService
from circuit_backend.domain.entities import Circuit, Project
from circuit_backend.domain.exceptions import EntityNotFoundError, ValidationError
from circuit_backend.infrastructure.documents import InMemoryDocumentStore


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def service(store: InMemoryDocumentStore) -> ProjectService:
    return ProjectService(store)


@pytest.mark.asyncio
async def test_create_project_with_settings_and_tags(service: ProjectService):
    project_id = await service.create(
        "u1",
        Project(name="Filter", description="Low-pass", settings={"grid": 10}, tags=["audio"]),
    )

    project = await service.get("u1", project_id)
    assert project.description == "Low-pass"
    assert project.settings == {"grid": 10}
    assert project.tags == ["audio"]
    assert project.payload is None


@pytest.mark.asyncio
async def test_create_rejects_unknown_status(service: ProjectService):
    with pytest.raises(ValidationError):
        await service.create("u1", Project(name="P", status="deleted"))


@pytest.mark.asyncio
async def test_archive_project(service: ProjectService):
    project_id = await service.create("u1", Project(name="P"))
    project = await service.update("u1", project_id, {"status": "archived"})
    assert project.status == "archived"
    assert project.version == 1


@pytest.mark.asyncio
async def test_update_rejects_non_mapping_settings(service: ProjectService):
    project_id = await service.create("u1", Project(name="P"))
    with pytest.raises(ValidationError):
        await service.update("u1", project_id, {"settings": "dark"})


@pytest.mark.asyncio
async def test_duplicate_copies_project_under_new_id(service: ProjectService):
    original_id = await service.create(
        "u1", Project(name="Amp", description="Class A", settings={"units": "mm"}, tags=["x"])
    )

    copy_id = await service.duplicate("u1", original_id)

    assert copy_id != original_id
    copy = await service.get("u1", copy_id)
    assert copy.name == "Amp (Copy)"
    assert copy.description == "Class A"
    assert copy.settings == {"units": "mm"}
    assert copy.tags == ["x"]
    assert copy.version == 1
    assert copy.owner_id == "u1"


@pytest.mark.asyncio
async def test_duplicate_with_explicit_name(service: ProjectService):
    original_id = await service.create("u1", Project(name="Amp"))
    copy_id = await service.duplicate("u1", original_id, name="Amp v2")
    assert (await service.get("u1", copy_id)).name == "Amp v2"


@pytest.mark.asyncio
async def test_duplicate_does_not_copy_circuits(store, service: ProjectService):
    circuits = CircuitService(store, service)
    original_id = await service.create("u1", Project(name="Amp"))
    await circuits.create("u1", Circuit(name="C", parent_id=original_id))

    copy_id = await service.duplicate("u1", original_id)

    assert await circuits.list_by_parent("u1", copy_id) == []


@pytest.mark.asyncio
async def test_duplicate_foreign_project_is_not_found(service: ProjectService):
    original_id = await service.create("u1", Project(name="Amp"))
    with pytest.raises(EntityNotFoundError):
        await service.duplicate("u2", original_id)
