"""Local filesystem implementation of the FileStorage port.

Storage layout mirrors the logical paths:
    <upload_dir>/<path>

Download URLs point at the API's own download route:
    <base_url>/<path>
"""

import logging
import mimetypes
import posixpath
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import quote

from circuit_backend.application.interfaces import FileStorage
from circuit_backend.domain.entities import StoredObject
from circuit_backend.domain.exceptions import EntityNotFoundError, StoreError, ValidationError

logger = logging.getLogger(__name__)


class LocalFileStorage(FileStorage):
    """Infrastructure adapter for local file storage."""

    def __init__(self, upload_dir: str, base_url: str):
        self._root = Path(upload_dir).resolve()
        self._root.mkdir(parents=True, exist_ok=True)
        self._base_url = base_url.rstrip("/")

    # ── Paths ───────────────────────────────────────────────────────

    def _resolve(self, path: str) -> Path:
        """Map a logical path to a location under the root; refuse anything outside it."""
        logical = posixpath.normpath((path or "").replace("\\", "/").lstrip("/"))
        if logical in ("", ".") or logical == ".." or logical.startswith("../"):
            raise ValidationError(f"Invalid storage path: {path}", field="path")
        target = (self._root / logical).resolve()
        if self._root not in target.parents:
            raise ValidationError(f"Invalid storage path: {path}", field="path")
        return target

    def _logical(self, target: Path) -> str:
        return target.relative_to(self._root).as_posix()

    def _url(self, logical: str) -> str:
        return f"{self._base_url}/{quote(logical)}"

    def _describe(self, target: Path) -> StoredObject:
        logical = self._logical(target)
        stat = target.stat()
        return StoredObject(
            path=logical,
            name=target.name,
            size=stat.st_size,
            content_type=mimetypes.guess_type(target.name)[0] or "application/octet-stream",
            url=self._url(logical),
            updated_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    # ── FileStorage ─────────────────────────────────────────────────

    async def put(self, path: str, content: bytes) -> str:
        target = self._resolve(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            raise StoreError(f"Failed to store {path}: {exc}") from exc
        logger.info("Stored file: %s (%d bytes)", target, len(content))
        return self._url(self._logical(target))

    async def get(self, path: str) -> str:
        return self._url(self._logical(self.open(path)))

    async def delete(self, path: str) -> None:
        target = self._resolve(path)
        if not target.is_file():
            return
        try:
            target.unlink(missing_ok=True)
        except OSError as exc:
            raise StoreError(f"Failed to delete {path}: {exc}") from exc
        logger.info("Deleted file from disk: %s", target)

    async def list(self, prefix: str) -> list[StoredObject]:
        base = self._resolve(prefix)
        if base.is_file():
            return [self._describe(base)]
        if not base.is_dir():
            return []
        return [
            self._describe(item)
            for item in sorted(base.rglob("*"))
            if item.is_file()
        ]

    def open(self, path: str) -> Path:
        target = self._resolve(path)
        if not target.is_file():
            raise EntityNotFoundError("File", path)
        return target
