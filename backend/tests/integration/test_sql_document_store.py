"""Integration tests for the SQLDocumentStore on SQLite."""

import pytest

from circuit_backend.application.interfaces import BatchOperation
from circuit_backend.application.services import CircuitService, ProjectService
from circuit_backend.domain.entities import Circuit, Project
from circuit_backend.domain.exceptions import (
    EntityNotFoundError,
    StoreError,
    UnsupportedOperatorError,
)
from circuit_backend.infrastructure.documents import SQLDocumentStore


@pytest.fixture
def store(session) -> SQLDocumentStore:
    return SQLDocumentStore(session)


@pytest.mark.asyncio
async def test_insert_and_get(store: SQLDocumentStore):
    doc_id = await store.insert("projects", {"name": "P", "tags": ["a"], "settings": {"k": 1}})
    doc = await store.get("projects", doc_id)

    assert doc["id"] == doc_id
    assert doc["name"] == "P"
    assert doc["tags"] == ["a"]
    assert doc["settings"] == {"k": 1}
    assert doc["createdAt"] is not None


@pytest.mark.asyncio
async def test_get_missing_raises_not_found(store: SQLDocumentStore):
    with pytest.raises(EntityNotFoundError):
        await store.get("projects", "missing")


@pytest.mark.asyncio
async def test_update_fields_merges(store: SQLDocumentStore):
    await store.put("circuits", "c1", {"name": "C", "version": 1})
    await store.update_fields("circuits", "c1", {"version": 2, "payload": {"x": 1}})

    doc = await store.get("circuits", "c1")
    assert doc["name"] == "C"
    assert doc["version"] == 2
    assert doc["payload"] == {"x": 1}


@pytest.mark.asyncio
async def test_update_fields_missing_raises_not_found(store: SQLDocumentStore):
    with pytest.raises(EntityNotFoundError):
        await store.update_fields("circuits", "missing", {"name": "x"})


@pytest.mark.asyncio
async def test_delete_is_idempotent(store: SQLDocumentStore):
    await store.put("projects", "p1", {"name": "P"})
    await store.delete("projects", "p1")
    await store.delete("projects", "p1")
    with pytest.raises(EntityNotFoundError):
        await store.get("projects", "p1")


@pytest.mark.asyncio
async def test_non_serializable_fields_raise_store_error(store: SQLDocumentStore):
    with pytest.raises(StoreError):
        await store.insert("projects", {"name": object()})


@pytest.mark.asyncio
async def test_query_filters_within_collection(store: SQLDocumentStore):
    await store.put("projects", "a", {"ownerId": "u1", "size": 1})
    await store.put("projects", "b", {"ownerId": "u2", "size": 2})
    await store.put("circuits", "c", {"ownerId": "u1", "size": 3})

    owned = await store.query("projects", "ownerId", "==", "u1")
    large = await store.query("projects", "size", "gte", 2)

    assert [d["id"] for d in owned] == ["a"]
    assert [d["id"] for d in large] == ["b"]


@pytest.mark.asyncio
async def test_query_unknown_operator(store: SQLDocumentStore):
    with pytest.raises(UnsupportedOperatorError):
        await store.query("projects", "ownerId", "between", "u1")


@pytest.mark.asyncio
async def test_batch_is_all_or_nothing(store: SQLDocumentStore):
    await store.put("projects", "p1", {"name": "Original"})

    with pytest.raises(StoreError):
        await store.batch([
            BatchOperation("update", "projects", "p1", {"name": "Changed"}),
            BatchOperation("create", "projects", "p2", {"name": "New"}),
            BatchOperation("update", "projects", "ghost", {"name": "x"}),
        ])

    assert (await store.get("projects", "p1"))["name"] == "Original"
    with pytest.raises(EntityNotFoundError):
        await store.get("projects", "p2")


@pytest.mark.asyncio
async def test_batch_create_then_delete_in_one_call(store: SQLDocumentStore):
    await store.batch([
        BatchOperation("create", "projects", "tmp", {"name": "Temp"}),
        BatchOperation("update", "projects", "tmp", {"name": "Temp 2"}),
        BatchOperation("delete", "projects", "tmp"),
        BatchOperation("create", "projects", "kept", {"name": "Kept"}),
    ])

    with pytest.raises(EntityNotFoundError):
        await store.get("projects", "tmp")
    assert (await store.get("projects", "kept"))["name"] == "Kept"


@pytest.mark.asyncio
async def test_services_on_sql_store(store: SQLDocumentStore):
    projects = ProjectService(store)
    circuits = CircuitService(store, projects)

    project_id = await projects.create("alice", Project(name="Amp"))
    circuit_id = await circuits.create(
        "alice", Circuit(name="Stage", parent_id=project_id, payload={"components": []})
    )
    updated = await circuits.update("alice", circuit_id, {"payload": {"components": ["r1"]}})

    assert updated.version == 2
    assert [c.id for c in await circuits.list_by_parent("alice", project_id)] == [circuit_id]
    with pytest.raises(EntityNotFoundError):
        await circuits.get("bob", circuit_id)


@pytest.mark.asyncio
async def test_put_rejects_non_datetime_timestamps(store: SQLDocumentStore):
    with pytest.raises(StoreError):
        await store.put("projects", "p1", {"name": "P", "createdAt": "2000-01-01"})
    with pytest.raises(EntityNotFoundError):
        await store.get("projects", "p1")


@pytest.mark.asyncio
async def test_update_fields_ignores_written_timestamps(store: SQLDocumentStore):
    await store.put("projects", "p1", {"name": "P"})
    before = await store.get("projects", "p1")

    await store.update_fields("projects", "p1", {"createdAt": "2000-01-01", "name": "Q"})

    after = await store.get("projects", "p1")
    assert after["name"] == "Q"
    assert after["createdAt"] == before["createdAt"]
