"""In-process DocumentStore — dict-of-dicts, used for local development and tests."""

import copy
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from circuit_backend.application.interfaces import (
    BatchOperation,
    BatchOperationType,
    Document,
    DocumentStore,
    QueryOperator,
)
from circuit_backend.domain.exceptions import EntityNotFoundError, StoreError
from circuit_backend.infrastructure.documents.predicates import (
    check_operand,
    check_timestamps,
    matches,
)

logger = logging.getLogger(__name__)

_Collections = dict[str, dict[str, Document]]


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _copy(fields: Document) -> Document:
    try:
        return copy.deepcopy(fields)
    except (TypeError, copy.Error) as exc:
        raise StoreError(f"Document is not serializable: {exc}") from exc


class InMemoryDocumentStore(DocumentStore):
    """Keeps deep copies of every document so callers never share state with the store.

    Natural ordering is insertion order.
    """

    def __init__(self) -> None:
        self._collections: _Collections = {}

    # ── Single-document writes ──────────────────────────────────────

    async def put(self, collection: str, document_id: str, fields: Document) -> None:
        self._apply_put(self._collections, collection, document_id, _copy(fields))

    async def insert(self, collection: str, fields: Document) -> str:
        document_id = str(uuid4())
        self._apply_put(self._collections, collection, document_id, _copy(fields))
        return document_id

    async def update_fields(
        self, collection: str, document_id: str, fields: Document
    ) -> None:
        self._apply_update(self._collections, collection, document_id, _copy(fields))

    async def delete(self, collection: str, document_id: str) -> None:
        self._collections.get(collection, {}).pop(document_id, None)

    # ── Reads ───────────────────────────────────────────────────────

    async def get(self, collection: str, document_id: str) -> Document:
        stored = self._collections.get(collection, {}).get(document_id)
        if stored is None:
            raise EntityNotFoundError(collection, document_id)
        return self._present(document_id, stored)

    async def query(
        self,
        collection: str,
        field_name: str,
        operator: str | QueryOperator,
        value: Any,
    ) -> list[Document]:
        op = QueryOperator.parse(operator)
        check_operand(op, value)
        return [
            self._present(document_id, stored)
            for document_id, stored in self._collections.get(collection, {}).items()
            if matches(stored, field_name, op, value)
        ]

    # ── Batch ───────────────────────────────────────────────────────

    async def batch(self, operations: list[BatchOperation]) -> None:
        # Work on shallow per-collection copies; documents are replaced, never mutated.
        staged: _Collections = {
            name: dict(documents) for name, documents in self._collections.items()
        }
        try:
            for op in operations:
                if op.type is BatchOperationType.CREATE:
                    self._apply_put(staged, op.collection, op.document_id, _copy(op.fields))
                elif op.type is BatchOperationType.UPDATE:
                    self._apply_update(staged, op.collection, op.document_id, _copy(op.fields))
                else:
                    staged.get(op.collection, {}).pop(op.document_id, None)
        except EntityNotFoundError as exc:
            raise StoreError(f"Batch aborted: {exc}") from exc

        self._collections = staged
        logger.debug("Committed batch of %d operation(s)", len(operations))

    # ── Helpers ─────────────────────────────────────────────────────

    @staticmethod
    def _present(document_id: str, stored: Document) -> Document:
        document = copy.deepcopy(stored)
        document["id"] = document_id
        return document

    @staticmethod
    def _apply_put(
        collections: _Collections, collection: str, document_id: str, fields: Document
    ) -> None:
        check_timestamps(fields)
        documents = collections.setdefault(collection, {})
        existing = documents.get(document_id)
        fields.pop("id", None)
        now = _now()
        fields.setdefault("createdAt", existing["createdAt"] if existing else now)
        fields.setdefault("updatedAt", now)
        documents[document_id] = fields

    @staticmethod
    def _apply_update(
        collections: _Collections, collection: str, document_id: str, fields: Document
    ) -> None:
        documents = collections.get(collection, {})
        existing = documents.get(document_id)
        if existing is None:
            raise EntityNotFoundError(collection, document_id)
        fields.pop("id", None)
        merged = {**existing, **fields}
        merged["createdAt"] = existing["createdAt"]
        merged["updatedAt"] = _now()
        documents[document_id] = merged
