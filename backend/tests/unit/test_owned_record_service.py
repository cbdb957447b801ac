"""Unit tests for ownership scoping and versioning of projects and circuits."""

import asyncio
import logging

import pytest

from circuit_backend.application.services import CircuitService, ProjectService
from circuit_backend.domain.entities import Circuit, Project
from circuit_backend.domain.exceptions import (
    AccessDeniedError,
    EntityNotFoundError,
    StoreError,
    ValidationError,
)
from circuit_backend.infrastructure.documents import InMemoryDocumentStore

ALICE = "alice-uid"
BOB = "bob-uid"


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def projects(store: InMemoryDocumentStore) -> ProjectService:
    return ProjectService(store)


@pytest.fixture
def circuits(store: InMemoryDocumentStore, projects: ProjectService) -> CircuitService:
    return CircuitService(store, projects)


async def _project(projects: ProjectService, owner: str = ALICE, name: str = "P") -> str:
    return await projects.create(owner, Project(name=name))


async def _circuit(
    circuits: CircuitService, project_id: str, owner: str = ALICE, payload=None
) -> str:
    return await circuits.create(
        owner, Circuit(name="C", parent_id=project_id, payload=payload or {"components": []})
    )


# ── create ──


@pytest.mark.asyncio
async def test_create_stamps_owner_and_version_one(projects: ProjectService):
    project = Project(name="Amp", owner_id="someone-else", version=42)
    project_id = await projects.create(ALICE, project)

    stored = await projects.get(ALICE, project_id)
    assert stored.owner_id == ALICE
    assert stored.version == 1
    assert stored.status == "active"
    assert stored.created_at is not None


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ["", "   ", "x" * 256])
async def test_create_rejects_invalid_name(
    store: InMemoryDocumentStore, projects: ProjectService, name: str
):
    with pytest.raises(ValidationError):
        await projects.create(ALICE, Project(name=name))

    assert await store.query("projects", "ownerId", "==", ALICE) == []


@pytest.mark.asyncio
async def test_create_respects_configured_name_limit(store: InMemoryDocumentStore):
    service = ProjectService(store, max_name_length=5)
    with pytest.raises(ValidationError):
        await service.create(ALICE, Project(name="toolong"))


@pytest.mark.asyncio
async def test_create_circuit_requires_project(circuits: CircuitService):
    with pytest.raises(ValidationError):
        await circuits.create(ALICE, Circuit(name="C"))


@pytest.mark.asyncio
async def test_create_circuit_in_foreign_project_is_denied(projects, circuits):
    project_id = await _project(projects, owner=BOB)

    with pytest.raises(AccessDeniedError):
        await _circuit(circuits, project_id, owner=ALICE)


@pytest.mark.asyncio
async def test_create_circuit_in_missing_project_is_denied(circuits: CircuitService):
    with pytest.raises(AccessDeniedError):
        await _circuit(circuits, "no-such-project")


@pytest.mark.asyncio
async def test_circuit_payload_defaults_to_empty_mapping(projects, circuits):
    project_id = await _project(projects)
    circuit_id = await circuits.create(ALICE, Circuit(name="Blank", parent_id=project_id))

    circuit = await circuits.get(ALICE, circuit_id)
    assert circuit.payload == {}
    assert circuit.project_id == project_id
    assert circuit.version == 1


# ── get ──


@pytest.mark.asyncio
async def test_get_missing_raises_not_found(projects: ProjectService):
    with pytest.raises(EntityNotFoundError) as exc_info:
        await projects.get(ALICE, "missing")
    assert not isinstance(exc_info.value, AccessDeniedError)


@pytest.mark.asyncio
async def test_non_owner_error_is_indistinguishable_from_missing(projects):
    project_id = await _project(projects, owner=ALICE)

    with pytest.raises(EntityNotFoundError) as denied:
        await projects.get(BOB, project_id)
    with pytest.raises(EntityNotFoundError) as missing:
        await projects.get(BOB, "missing")

    assert isinstance(denied.value, AccessDeniedError)
    assert denied.value.entity_type == missing.value.entity_type
    assert str(denied.value).replace(project_id, "?") == str(missing.value).replace("missing", "?")


@pytest.mark.asyncio
async def test_get_malformed_document_raises_store_error(store, projects):
    await store.put("projects", "broken", {"ownerId": ALICE})
    with pytest.raises(StoreError):
        await projects.get(ALICE, "broken")


# ── update ──


@pytest.mark.asyncio
async def test_payload_update_increments_version(projects, circuits):
    project_id = await _project(projects)
    circuit_id = await _circuit(circuits, project_id)

    first = await circuits.update(ALICE, circuit_id, {"payload": {"components": ["r1"]}})
    second = await circuits.update(ALICE, circuit_id, {"payload": {"components": ["r1", "c1"]}})

    assert first.version == 2
    assert second.version == 3
    assert second.payload == {"components": ["r1", "c1"]}


@pytest.mark.asyncio
async def test_update_without_payload_keeps_version(projects, circuits):
    project_id = await _project(projects)
    circuit_id = await _circuit(circuits, project_id)

    updated = await circuits.update(ALICE, circuit_id, {"name": "Renamed", "tags": ["rf"]})

    assert updated.name == "Renamed"
    assert updated.tags == ["rf"]
    assert updated.version == 1


@pytest.mark.asyncio
async def test_update_ignores_immutable_and_managed_fields(projects, circuits):
    project_id = await _project(projects)
    other_project = await _project(projects, name="Other")
    circuit_id = await _circuit(circuits, project_id)
    before = await circuits.get(ALICE, circuit_id)

    updated = await circuits.update(
        ALICE,
        circuit_id,
        {
            "id": "hijacked",
            "ownerId": BOB,
            "parentId": other_project,
            "createdAt": "2000-01-01T00:00:00+00:00",
            "version": 99,
            "name": "Still mine",
        },
    )

    assert updated.id == circuit_id
    assert updated.owner_id == ALICE
    assert updated.project_id == project_id
    assert updated.created_at == before.created_at
    assert updated.version == 1
    assert updated.name == "Still mine"


@pytest.mark.asyncio
async def test_update_rejects_non_mapping_payload(projects, circuits):
    project_id = await _project(projects)
    circuit_id = await _circuit(circuits, project_id)

    with pytest.raises(ValidationError):
        await circuits.update(ALICE, circuit_id, {"payload": ["not", "a", "mapping"]})


@pytest.mark.asyncio
async def test_update_rejects_empty_name(projects: ProjectService):
    project_id = await _project(projects)
    with pytest.raises(ValidationError):
        await projects.update(ALICE, project_id, {"name": ""})


@pytest.mark.asyncio
async def test_project_update_keeps_only_project_fields(store, projects: ProjectService):
    project_id = await _project(projects)

    updated = await projects.update(
        ALICE,
        project_id,
        {
            "payload": {"x": 1},
            "isTemplate": "yes",
            "junk": "object",
            "status": "archived",
        },
    )

    assert updated.version == 1
    assert updated.status == "archived"
    stored = await store.get("projects", project_id)
    assert "payload" not in stored
    assert "isTemplate" not in stored
    assert "junk" not in stored
    assert stored["version"] == 1


@pytest.mark.asyncio
async def test_circuit_update_drops_unknown_fields(store, projects, circuits):
    project_id = await _project(projects)
    circuit_id = await _circuit(circuits, project_id)

    updated = await circuits.update(
        ALICE, circuit_id, {"isTemplate": True, "status": "archived", "junk": 1}
    )

    assert updated.is_template is True
    assert updated.version == 1
    stored = await store.get("circuits", circuit_id)
    assert "status" not in stored
    assert "junk" not in stored


@pytest.mark.asyncio
async def test_circuit_update_rejects_non_boolean_template_flag(projects, circuits):
    project_id = await _project(projects)
    circuit_id = await _circuit(circuits, project_id)

    with pytest.raises(ValidationError):
        await circuits.update(ALICE, circuit_id, {"isTemplate": "yes"})


@pytest.mark.asyncio
async def test_non_owner_update_is_rejected_without_change(projects, circuits):
    project_id = await _project(projects)
    circuit_id = await _circuit(circuits, project_id, payload={"components": ["a"]})

    with pytest.raises(EntityNotFoundError):
        await circuits.update(BOB, circuit_id, {"payload": {"components": []}})

    circuit = await circuits.get(ALICE, circuit_id)
    assert circuit.payload == {"components": ["a"]}
    assert circuit.version == 1


# ── delete ──


@pytest.mark.asyncio
async def test_delete_twice_reports_not_found_the_second_time(projects: ProjectService):
    project_id = await _project(projects)

    await projects.delete(ALICE, project_id)
    with pytest.raises(EntityNotFoundError):
        await projects.delete(ALICE, project_id)


@pytest.mark.asyncio
async def test_non_owner_delete_is_rejected_and_record_survives(projects):
    project_id = await _project(projects)

    with pytest.raises(EntityNotFoundError):
        await projects.delete(BOB, project_id)

    assert (await projects.get(ALICE, project_id)).id == project_id


@pytest.mark.asyncio
async def test_circuits_of_deleted_project_become_inaccessible(store, projects, circuits):
    project_id = await _project(projects)
    circuit_id = await _circuit(circuits, project_id)

    await projects.delete(ALICE, project_id)

    # No cascade: the document is still there, but nobody can reach it.
    assert (await store.get("circuits", circuit_id))["parentId"] == project_id
    with pytest.raises(AccessDeniedError):
        await circuits.get(ALICE, circuit_id)


# ── listing ──


@pytest.mark.asyncio
async def test_list_owned_returns_only_callers_records(projects: ProjectService):
    await _project(projects, owner=ALICE, name="A1")
    await _project(projects, owner=BOB, name="B1")
    await _project(projects, owner=ALICE, name="A2")

    names = [p.name for p in await projects.list_owned(ALICE)]
    assert names == ["A1", "A2"]


@pytest.mark.asyncio
async def test_list_by_parent_requires_owned_parent(projects, circuits):
    project_id = await _project(projects, owner=ALICE)
    await _circuit(circuits, project_id)

    with pytest.raises(AccessDeniedError):
        await circuits.list_by_parent(BOB, project_id)


@pytest.mark.asyncio
async def test_list_by_parent_skips_corrupted_records(store, projects, circuits, caplog):
    project_id = await _project(projects)
    good_id = await _circuit(circuits, project_id)
    await store.put(
        "circuits", "planted", {"name": "X", "ownerId": BOB, "parentId": project_id, "version": 1}
    )
    await store.put("circuits", "garbled", {"ownerId": ALICE, "parentId": project_id})

    with caplog.at_level(logging.WARNING):
        listed = await circuits.list_by_parent(ALICE, project_id)

    assert [c.id for c in listed] == [good_id]
    assert "planted" in caplog.text
    assert "garbled" in caplog.text


@pytest.mark.asyncio
async def test_list_by_parent_on_top_level_kind_is_rejected(projects: ProjectService):
    with pytest.raises(ValidationError):
        await projects.list_by_parent(ALICE, "anything")


# ── end-to-end flows ──


@pytest.mark.asyncio
async def test_owner_lifecycle_flow(projects, circuits):
    project_id = await projects.create(ALICE, Project(name="Amp"))
    circuit_id = await circuits.create(
        ALICE, Circuit(name="Stage 1", parent_id=project_id, payload={"components": []})
    )

    updated = await circuits.update(
        ALICE, circuit_id, {"payload": {"components": [{"id": "r1"}]}}
    )
    assert updated.version == 2

    listed = await circuits.list_by_parent(ALICE, project_id)
    assert [c.id for c in listed] == [circuit_id]
    assert listed[0].version == 2


@pytest.mark.asyncio
async def test_cross_user_isolation_flow(projects, circuits):
    project_id = await projects.create(ALICE, Project(name="Secret"))

    with pytest.raises(EntityNotFoundError):
        await projects.get(BOB, project_id)
    with pytest.raises(EntityNotFoundError):
        await circuits.create(BOB, Circuit(name="Intruder", parent_id=project_id))
    with pytest.raises(EntityNotFoundError):
        await projects.delete(BOB, project_id)

    assert (await projects.get(ALICE, project_id)).name == "Secret"
    assert await circuits.list_by_parent(ALICE, project_id) == []


class _GatedStore(InMemoryDocumentStore):
    """Holds every update_fields call until ``parties`` of them have arrived."""

    def __init__(self, parties: int):
        super().__init__()
        self._parties = parties
        self._arrived = 0
        self._released = asyncio.Event()

    async def update_fields(self, collection, document_id, fields):
        self._arrived += 1
        if self._arrived >= self._parties:
            self._released.set()
        await self._released.wait()
        await super().update_fields(collection, document_id, fields)


@pytest.mark.asyncio
async def test_concurrent_payload_updates_can_lose_a_version_bump():
    store = _GatedStore(parties=2)
    projects = ProjectService(store)
    circuits = CircuitService(store, projects)
    project_id = await projects.create(ALICE, Project(name="P"))
    circuit_id = await circuits.create(
        ALICE, Circuit(name="C", parent_id=project_id, payload={"rev": 0})
    )

    await asyncio.wait_for(
        asyncio.gather(
            circuits.update(ALICE, circuit_id, {"payload": {"rev": "a"}}),
            circuits.update(ALICE, circuit_id, {"payload": {"rev": "b"}}),
        ),
        timeout=5,
    )

    final = await circuits.get(ALICE, circuit_id)
    assert final.version == 2
    assert final.payload in ({"rev": "a"}, {"rev": "b"})
