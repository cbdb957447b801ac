"""Ownership-scoped record service — shared CRUD rules for projects and circuits.

Every read and write is scoped to the calling identity:

* ``create`` stamps ``ownerId`` with the caller and starts ``version`` at 1,
  whatever the input says.
* ``get`` checks existence first and ownership second. Both failures are
  ``EntityNotFoundError`` (``AccessDeniedError`` is a subclass with the same
  message), so a caller cannot probe for other users' records.
* ``update`` keeps only the fields the record kind allows callers to change
  and bumps ``version`` by one when, and only when, the payload is replaced. The bump is computed
  from the version read during the ownership check; two concurrent payload
  updates can therefore both write the same next version.
* ``list_by_parent`` skips records whose ``ownerId`` disagrees with the
  caller instead of failing the whole listing.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Generic, TypeVar

from circuit_backend.application.interfaces import Document, DocumentStore, QueryOperator
from circuit_backend.domain.entities import OwnedRecord
from circuit_backend.domain.exceptions import (
    AccessDeniedError,
    EntityNotFoundError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=OwnedRecord)

# Document field names
ID = "id"
OWNER_ID = "ownerId"
PARENT_ID = "parentId"
NAME = "name"
DESCRIPTION = "description"
PAYLOAD = "payload"
VERSION = "version"
TAGS = "tags"
CREATED_AT = "createdAt"
UPDATED_AT = "updatedAt"

COMMON_UPDATE_FIELDS = frozenset({NAME, DESCRIPTION, TAGS})

DEFAULT_MAX_NAME_LENGTH = 255


class OwnedRecordService(ABC, Generic[RecordT]):
    """Base service for one record kind stored in one document collection.

    Subclasses name the collection and entity label and provide the
    document ↔ entity mapping for their kind-specific fields. A kind with a
    parent passes the parent's service; ownership of the parent is then
    required for every access.
    """

    collection: str
    entity_type: str
    updatable_fields: frozenset[str] = COMMON_UPDATE_FIELDS

    def __init__(
        self,
        store: DocumentStore,
        parent: "OwnedRecordService[Any] | None" = None,
        *,
        max_name_length: int = DEFAULT_MAX_NAME_LENGTH,
    ):
        self._store = store
        self._parent = parent
        self._max_name_length = max_name_length

    # ── Kind-specific mapping ───────────────────────────────────────

    @abstractmethod
    def _extra_fields(self, record: RecordT) -> Document:
        """Document fields specific to this record kind."""
        ...

    @abstractmethod
    def _build(self, common: dict[str, Any], document: Document) -> RecordT:
        """Construct the entity from the common attributes plus kind-specific fields."""
        ...

    # ── Mapping ─────────────────────────────────────────────────────

    def _to_document(self, record: RecordT) -> Document:
        document: Document = {
            NAME: record.name,
            DESCRIPTION: record.description or "",
            TAGS: list(record.tags or []),
        }
        if self._parent is not None:
            document[PARENT_ID] = record.parent_id
            document[PAYLOAD] = record.payload if record.payload is not None else {}
        document.update(self._extra_fields(record))
        return document

    def _to_entity(self, document: Document) -> RecordT:
        """Map a stored document to an entity. Raises ValueError on malformed documents."""
        name = document.get(NAME)
        if not isinstance(name, str):
            raise ValueError(f"invalid {self.entity_type}: name is required")
        owner_id = document.get(OWNER_ID)
        if not isinstance(owner_id, str):
            raise ValueError(f"invalid {self.entity_type}: ownerId is required")
        parent_id = document.get(PARENT_ID)
        if self._parent is not None and not isinstance(parent_id, str):
            raise ValueError(f"invalid {self.entity_type}: parentId is required")

        version = document.get(VERSION, 1)
        if isinstance(version, bool) or not isinstance(version, int):
            raise ValueError(f"invalid {self.entity_type}: version must be an integer")

        tags = document.get(TAGS) or []
        payload = document.get(PAYLOAD)
        common = {
            "id": document.get(ID),
            "name": name,
            "owner_id": owner_id,
            "parent_id": parent_id if self._parent is not None else None,
            "description": document.get(DESCRIPTION) or "",
            "payload": payload if isinstance(payload, dict) else None,
            "version": version,
            "tags": [tag for tag in tags if isinstance(tag, str)],
            "created_at": _as_datetime(document.get(CREATED_AT)),
            "updated_at": _as_datetime(document.get(UPDATED_AT)),
        }
        return self._build(common, document)

    # ── Validation ──────────────────────────────────────────────────

    def _validate_name(self, name: Any) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError(f"{self.entity_type} name is required", field=NAME)
        if len(name) > self._max_name_length:
            raise ValidationError(
                f"{self.entity_type} name must not exceed {self._max_name_length} characters",
                field=NAME,
            )

    def _validate_fields(self, fields: Mapping[str, Any]) -> None:
        if NAME in fields:
            self._validate_name(fields[NAME])
        if DESCRIPTION in fields and not isinstance(fields[DESCRIPTION], str):
            raise ValidationError("description must be a string", field=DESCRIPTION)
        if TAGS in fields:
            tags = fields[TAGS]
            if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
                raise ValidationError("tags must be a list of strings", field=TAGS)
        if PAYLOAD in fields and not isinstance(fields[PAYLOAD], Mapping):
            raise ValidationError("payload must be a mapping", field=PAYLOAD)

    # ── Ownership ───────────────────────────────────────────────────

    async def _require_parent(self, caller_id: str, parent_id: str | None) -> None:
        """Raise AccessDeniedError unless the caller owns the parent record."""
        parent = self._parent
        if parent is None:
            raise ValidationError(f"{self.entity_type} records have no parent")
        if not parent_id:
            raise AccessDeniedError(parent.entity_type, parent_id or "")
        try:
            await parent.get(caller_id, parent_id)
        except EntityNotFoundError:
            raise AccessDeniedError(parent.entity_type, parent_id) from None

    # ── Operations ──────────────────────────────────────────────────

    async def create(self, caller_id: str, record: RecordT) -> str:
        """Store a new record owned by the caller and return its id."""
        self._validate_name(record.name)
        self._validate_fields(
            {DESCRIPTION: record.description or "", TAGS: list(record.tags or [])}
        )
        if record.payload is not None:
            self._validate_fields({PAYLOAD: record.payload})

        if self._parent is not None:
            if not record.parent_id:
                raise ValidationError(
                    f"{self._parent.entity_type} ID is required", field=PARENT_ID
                )
            await self._require_parent(caller_id, record.parent_id)

        document = self._to_document(record)
        document[OWNER_ID] = caller_id
        document[VERSION] = 1

        record_id = await self._store.insert(self.collection, document)
        logger.info(
            "Created %s %s for owner %s", self.entity_type, record_id, caller_id
        )
        return record_id

    async def get(self, caller_id: str, record_id: str) -> RecordT:
        """Return the record if it exists and belongs to the caller."""
        try:
            document = await self._store.get(self.collection, record_id)
        except EntityNotFoundError:
            raise EntityNotFoundError(self.entity_type, record_id) from None
        try:
            record = self._to_entity(document)
        except ValueError as exc:
            raise StoreError(f"{self.entity_type} {record_id} is malformed: {exc}") from exc

        if record.owner_id != caller_id:
            raise AccessDeniedError(self.entity_type, record_id)
        if self._parent is not None:
            try:
                await self._require_parent(caller_id, record.parent_id)
            except AccessDeniedError:
                raise AccessDeniedError(self.entity_type, record_id) from None
        return record

    async def update(
        self, caller_id: str, record_id: str, fields: Mapping[str, Any]
    ) -> RecordT:
        """Apply a partial update and return the updated record."""
        current = await self.get(caller_id, record_id)

        updates = {
            key: value for key, value in fields.items() if key in self.updatable_fields
        }
        ignored = set(fields) - set(updates)
        if ignored:
            logger.debug(
                "Ignoring non-updatable %s fields: %s",
                self.entity_type,
                ", ".join(sorted(ignored)),
            )
        self._validate_fields(updates)

        if PAYLOAD in updates:
            updates[PAYLOAD] = dict(updates[PAYLOAD])
            updates[VERSION] = current.version + 1

        if updates:
            await self._store.update_fields(self.collection, record_id, updates)
            logger.info(
                "Updated %s %s (fields=%s)",
                self.entity_type,
                record_id,
                ", ".join(sorted(updates)),
            )
        return await self.get(caller_id, record_id)

    async def delete(self, caller_id: str, record_id: str) -> None:
        """Delete the record after confirming the caller owns it."""
        await self.get(caller_id, record_id)
        await self._store.delete(self.collection, record_id)
        logger.info("Deleted %s %s", self.entity_type, record_id)

    async def list_owned(self, caller_id: str) -> list[RecordT]:
        """All records whose ownerId is the caller."""
        documents = await self._store.query(
            self.collection, OWNER_ID, QueryOperator.EQ, caller_id
        )
        return self._map_all(documents, caller_id)

    async def list_by_parent(self, caller_id: str, parent_id: str) -> list[RecordT]:
        """All of the caller's records under a parent the caller owns."""
        await self._require_parent(caller_id, parent_id)

        documents = await self._store.query(
            self.collection, PARENT_ID, QueryOperator.EQ, parent_id
        )
        return self._map_all(documents, caller_id)

    def _map_all(self, documents: list[Document], caller_id: str) -> list[RecordT]:
        records: list[RecordT] = []
        for document in documents:
            try:
                record = self._to_entity(document)
            except ValueError as exc:
                logger.warning(
                    "Skipping malformed %s %s: %s",
                    self.entity_type,
                    document.get(ID),
                    exc,
                )
                continue
            if record.owner_id != caller_id:
                logger.warning(
                    "Skipping %s %s: ownerId does not match caller (possible corruption)",
                    self.entity_type,
                    record.id,
                )
                continue
            records.append(record)
        return records


def _as_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None
    return None
