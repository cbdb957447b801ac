"""Shared fixtures for integration tests: a throwaway SQLite database and the API app."""

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from circuit_backend.infrastructure.database import Base, build_engine, build_session_factory
from circuit_backend.infrastructure.dependencies import get_document_store, get_file_storage
from circuit_backend.infrastructure.documents import InMemoryDocumentStore
from circuit_backend.infrastructure.storage.local_file_storage import LocalFileStorage
from circuit_backend.main import app
from circuit_backend.presentation.api.caller import HeaderCallerResolver, get_caller_resolver


@pytest_asyncio.fixture
async def session(tmp_path) -> AsyncIterator[AsyncSession]:
    """An AsyncSession bound to a fresh SQLite file with all tables created."""
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with build_session_factory(engine)() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def document_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def file_storage(tmp_path) -> LocalFileStorage:
    return LocalFileStorage(
        upload_dir=str(tmp_path / "uploads"),
        base_url="http://test/api/v1/storage/download",
    )


@pytest_asyncio.fixture
async def client(document_store, file_storage) -> AsyncIterator[AsyncClient]:
    """API client with the in-memory document store and X-User-ID caller resolution."""
    app.dependency_overrides[get_document_store] = lambda: document_store
    app.dependency_overrides[get_file_storage] = lambda: file_storage
    app.dependency_overrides[get_caller_resolver] = lambda: HeaderCallerResolver("X-User-ID")

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()

