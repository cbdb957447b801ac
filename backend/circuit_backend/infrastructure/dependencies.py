"""FastAPI dependency injection — wires infrastructure to application layer."""

from collections.abc import AsyncGenerator
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from circuit_backend.config import get_settings
from circuit_backend.application.interfaces import DocumentStore, FileStorage, IdentityProvider
from circuit_backend.application.services import (
    AuthService,
    CircuitService,
    ProjectService,
    StorageService,
    TemplateService,
)
from circuit_backend.infrastructure.database.session import get_db_session
from circuit_backend.infrastructure.database.repositories import SQLAlchemyUserRepository
from circuit_backend.infrastructure.documents import InMemoryDocumentStore, SQLDocumentStore
from circuit_backend.infrastructure.identity import FirebaseIdentityProvider
from circuit_backend.infrastructure.storage.local_file_storage import LocalFileStorage


@lru_cache
def get_memory_document_store() -> InMemoryDocumentStore:
    """Process-wide in-memory store, used when DOCUMENT_STORE_BACKEND=memory."""
    return InMemoryDocumentStore()


async def get_document_store(
    session: AsyncSession = Depends(get_db_session),
) -> AsyncGenerator[DocumentStore, None]:
    """Provides the configured document store for projects and circuits."""
    settings = get_settings()
    if settings.document_store_backend.strip().lower() == "memory":
        yield get_memory_document_store()
    else:
        yield SQLDocumentStore(session)


def get_file_storage() -> FileStorage:
    settings = get_settings()
    return LocalFileStorage(
        upload_dir=settings.upload_dir,
        base_url=f"{settings.public_base_url.rstrip('/')}/api/v1/storage/download",
    )


def get_identity_provider() -> IdentityProvider:
    settings = get_settings()
    return FirebaseIdentityProvider(
        api_key=settings.firebase_api_key,
        base_url=settings.firebase_auth_base_url,
    )


def get_template_service() -> TemplateService:
    return TemplateService()


async def get_project_service(
    store: DocumentStore = Depends(get_document_store),
) -> AsyncGenerator[ProjectService, None]:
    """Provides a ProjectService bound to the request's document store."""
    settings = get_settings()
    yield ProjectService(store, max_name_length=settings.max_name_length)


async def get_circuit_service(
    store: DocumentStore = Depends(get_document_store),
    templates: TemplateService = Depends(get_template_service),
) -> AsyncGenerator[CircuitService, None]:
    """Provides a CircuitService; ownership of circuits is checked through their project."""
    settings = get_settings()
    projects = ProjectService(store, max_name_length=settings.max_name_length)
    yield CircuitService(
        store,
        projects,
        templates,
        max_name_length=settings.max_name_length,
    )


async def get_storage_service(
    circuits: CircuitService = Depends(get_circuit_service),
    storage: FileStorage = Depends(get_file_storage),
) -> AsyncGenerator[StorageService, None]:
    settings = get_settings()
    yield StorageService(
        storage,
        circuits,
        max_upload_size_mb=settings.max_upload_size_mb,
        max_image_size_mb=settings.max_image_size_mb,
    )


async def get_auth_service(
    session: AsyncSession = Depends(get_db_session),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> AsyncGenerator[AuthService, None]:
    """Provides an AuthService with the relational user repository wired up."""
    repository = SQLAlchemyUserRepository(session)
    yield AuthService(identity_provider, repository)
