"""Application service for user file storage.

Every path a caller sees is relative to that caller's own area
(``users/<caller_id>/``) in the underlying FileStorage.
"""

import logging
import mimetypes
import posixpath
import re
from pathlib import Path

from circuit_backend.application.interfaces import FileStorage
from circuit_backend.application.services.circuit_service import CircuitService
from circuit_backend.domain.entities import StoredObject
from circuit_backend.domain.exceptions import AccessDeniedError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_FOLDER = "uploads"
_MB = 1024 * 1024


def _clean_relative(path: str, what: str = "path") -> str:
    """Normalise a caller-supplied relative path; reject anything escaping its root."""
    raw = (path or "").replace("\\", "/").strip()
    if not raw:
        raise ValidationError(f"File {what} is required", field=what)
    normalised = posixpath.normpath(raw.lstrip("/"))
    if normalised in (".", "") or normalised == ".." or normalised.startswith("../"):
        raise ValidationError(f"Invalid file {what}: {path}", field=what)
    return normalised


def _clean_filename(filename: str) -> str:
    name = posixpath.basename((filename or "").replace("\\", "/"))
    name = re.sub(r"[^\w.\-]", "_", name).strip("._")
    if not name:
        raise ValidationError("File name is required", field="filename")
    return name


class StorageService:
    """Upload, locate, list and delete files scoped to the calling user."""

    def __init__(
        self,
        storage: FileStorage,
        circuits: CircuitService,
        *,
        max_upload_size_mb: int = 10,
        max_image_size_mb: int = 5,
    ):
        self._storage = storage
        self._circuits = circuits
        self._max_upload_bytes = max_upload_size_mb * _MB
        self._max_image_bytes = max_image_size_mb * _MB

    @staticmethod
    def _user_root(caller_id: str) -> str:
        if caller_id in ("", ".", "..") or "/" in caller_id or "\\" in caller_id:
            raise ValidationError(f"Invalid owner id: {caller_id!r}", field="owner")
        return f"users/{caller_id}"

    def _absolute(self, caller_id: str, relative: str) -> str:
        return f"{self._user_root(caller_id)}/{_clean_relative(relative)}"

    def _relative(self, caller_id: str, obj: StoredObject) -> StoredObject:
        prefix = self._user_root(caller_id) + "/"
        obj.path = obj.path[len(prefix):] if obj.path.startswith(prefix) else obj.path
        return obj

    async def upload_file(
        self,
        caller_id: str,
        filename: str,
        content: bytes,
        folder: str | None = None,
        circuit_id: str | None = None,
    ) -> StoredObject:
        """Store a general upload (default folder ``uploads``)."""
        if len(content) > self._max_upload_bytes:
            raise ValidationError(
                f"File size exceeds {self._max_upload_bytes // _MB}MB limit", field="file"
            )
        name = _clean_filename(filename)
        if circuit_id:
            name = f"circuit_{_clean_filename(circuit_id)}_{name}"
        relative = f"{_clean_relative(folder or DEFAULT_FOLDER, 'folder')}/{name}"
        return await self._put(caller_id, relative, content)

    async def upload_circuit_image(
        self,
        caller_id: str,
        circuit_id: str,
        filename: str,
        content: bytes,
    ) -> StoredObject:
        """Store a diagram image for a circuit the caller owns."""
        if not circuit_id:
            raise ValidationError("Circuit ID is required", field="circuit_id")
        if len(content) > self._max_image_bytes:
            raise ValidationError(
                f"Image size exceeds {self._max_image_bytes // _MB}MB limit", field="image"
            )
        await self._circuits.get(caller_id, circuit_id)

        safe_id = _clean_filename(circuit_id)
        name = f"circuit_{safe_id}_{_clean_filename(filename)}"
        return await self._put(caller_id, f"circuits/{safe_id}/images/{name}", content)

    async def get_file_url(self, caller_id: str, path: str) -> str:
        return await self._storage.get(self._absolute(caller_id, path))

    async def delete_file(self, caller_id: str, path: str) -> None:
        await self._storage.delete(self._absolute(caller_id, path))
        logger.info("Deleted file %s for %s", path, caller_id)

    async def list_files(self, caller_id: str, folder: str | None = None) -> list[StoredObject]:
        prefix = self._absolute(caller_id, folder or DEFAULT_FOLDER)
        objects = await self._storage.list(prefix)
        return [self._relative(caller_id, obj) for obj in objects]

    def resolve_download(self, caller_id: str, storage_path: str) -> Path:
        """Local file behind a download URL, provided it lies in the caller's area."""
        normalised = _clean_relative(storage_path)
        if not normalised.startswith(self._user_root(caller_id) + "/"):
            raise AccessDeniedError("File", storage_path)
        return self._storage.open(normalised)

    async def _put(self, caller_id: str, relative: str, content: bytes) -> StoredObject:
        url = await self._storage.put(self._absolute(caller_id, relative), content)
        logger.info("Stored %s (%d bytes) for %s", relative, len(content), caller_id)
        return StoredObject(
            path=relative,
            name=posixpath.basename(relative),
            size=len(content),
            content_type=mimetypes.guess_type(relative)[0] or "application/octet-stream",
            url=url,
        )
