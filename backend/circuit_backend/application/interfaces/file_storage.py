"""Abstract file storage interface (port) — binary blobs keyed by path."""

from abc import ABC, abstractmethod
from pathlib import Path

from circuit_backend.domain.entities import StoredObject


class FileStorage(ABC):
    """Port for blob storage. Paths are ``/``-separated and relative to the storage root."""

    @abstractmethod
    async def put(self, path: str, content: bytes) -> str:
        """Store content at path (overwriting) and return its download URL."""
        ...

    @abstractmethod
    async def get(self, path: str) -> str:
        """Return the download URL for path. Raises EntityNotFoundError if absent."""
        ...

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Remove the blob at path if present."""
        ...

    @abstractmethod
    async def list(self, prefix: str) -> list[StoredObject]:
        """List blobs under a path prefix."""
        ...

    @abstractmethod
    def open(self, path: str) -> Path:
        """Return a local filesystem path for streaming. Raises EntityNotFoundError if absent."""
        ...
