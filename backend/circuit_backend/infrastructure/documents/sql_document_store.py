"""DocumentStore backed by a single SQLAlchemy 'documents' table.

Each row holds one document: ``(collection, id)`` is the primary key, the
timestamps have their own columns and all other fields live in a JSON
column. Query predicates are evaluated in Python over the collection's rows
so behaviour is identical on PostgreSQL and SQLite.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from circuit_backend.application.interfaces import (
    BatchOperation,
    BatchOperationType,
    Document,
    DocumentStore,
    QueryOperator,
)
from circuit_backend.domain.exceptions import EntityNotFoundError, StoreError
from circuit_backend.infrastructure.database.models import DocumentModel
from circuit_backend.infrastructure.documents.predicates import (
    TIMESTAMP_FIELDS,
    check_operand,
    check_timestamps,
    matches,
)

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class SQLDocumentStore(DocumentStore):
    """Implements the DocumentStore port using SQLAlchemy async sessions.

    Writes are flushed, not committed; the request-scoped session commits
    or rolls back as a whole.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    # ── Mapping ─────────────────────────────────────────────────────

    @staticmethod
    def _to_document(model: DocumentModel) -> Document:
        document = dict(model.data or {})
        document["id"] = model.id
        document["createdAt"] = model.created_at
        document["updatedAt"] = model.updated_at
        return document

    @staticmethod
    def _split(fields: Document) -> tuple[Document, datetime | None, datetime | None]:
        """Separate JSON data from the timestamp columns and check it serializes."""
        data = {k: v for k, v in fields.items() if k != "id" and k not in TIMESTAMP_FIELDS}
        check_timestamps(fields)
        created_at = fields.get("createdAt")
        updated_at = fields.get("updatedAt")
        try:
            data = json.loads(json.dumps(data))
        except (TypeError, ValueError) as exc:
            raise StoreError(f"Document is not JSON serializable: {exc}") from exc
        return data, created_at, updated_at

    async def _load(self, collection: str, document_id: str) -> DocumentModel | None:
        try:
            return await self._session.get(DocumentModel, (collection, document_id))
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to load {collection}/{document_id}: {exc}") from exc

    async def _flush(self) -> None:
        try:
            await self._session.flush()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to write documents: {exc}") from exc

    # ── Staging helpers (no I/O besides loading) ────────────────────

    def _stage_put(
        self,
        model: DocumentModel | None,
        collection: str,
        document_id: str,
        fields: Document,
    ) -> DocumentModel:
        data, created_at, updated_at = self._split(fields)
        now = _now()
        if model is None:
            model = DocumentModel(
                collection=collection,
                id=document_id,
                data=data,
                created_at=created_at or now,
                updated_at=updated_at or now,
            )
            self._session.add(model)
            return model
        model.data = data
        if created_at is not None:
            model.created_at = created_at
        model.updated_at = updated_at or now
        return model

    def _stage_update(self, model: DocumentModel, fields: Document) -> None:
        # Timestamps are store-managed on update.
        data, _, _ = self._split(
            {k: v for k, v in fields.items() if k not in TIMESTAMP_FIELDS}
        )
        model.data = {**(model.data or {}), **data}
        model.updated_at = _now()

    # ── DocumentStore ───────────────────────────────────────────────

    async def put(self, collection: str, document_id: str, fields: Document) -> None:
        model = await self._load(collection, document_id)
        self._stage_put(model, collection, document_id, fields)
        await self._flush()

    async def insert(self, collection: str, fields: Document) -> str:
        document_id = str(uuid4())
        self._stage_put(None, collection, document_id, fields)
        await self._flush()
        return document_id

    async def get(self, collection: str, document_id: str) -> Document:
        model = await self._load(collection, document_id)
        if model is None:
            raise EntityNotFoundError(collection, document_id)
        return self._to_document(model)

    async def update_fields(
        self, collection: str, document_id: str, fields: Document
    ) -> None:
        model = await self._load(collection, document_id)
        if model is None:
            raise EntityNotFoundError(collection, document_id)
        self._stage_update(model, fields)
        await self._flush()

    async def delete(self, collection: str, document_id: str) -> None:
        model = await self._load(collection, document_id)
        if model is None:
            return
        await self._session.delete(model)
        await self._flush()

    async def query(
        self,
        collection: str,
        field_name: str,
        operator: str | QueryOperator,
        value: Any,
    ) -> list[Document]:
        op = QueryOperator.parse(operator)
        check_operand(op, value)

        stmt = (
            select(DocumentModel)
            .where(DocumentModel.collection == collection)
            .order_by(DocumentModel.created_at, DocumentModel.id)
        )
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to query {collection}: {exc}") from exc

        documents = [self._to_document(row) for row in result.scalars().all()]
        return [doc for doc in documents if matches(doc, field_name, op, value)]

    async def batch(self, operations: list[BatchOperation]) -> None:
        # Validation pass: load every target and simulate existence so that a
        # failing operation is detected before anything is staged.
        models: dict[tuple[str, str], DocumentModel | None] = {}
        present: dict[tuple[str, str], bool] = {}
        for op in operations:
            key = (op.collection, op.document_id)
            if key not in models:
                models[key] = await self._load(*key)
                present[key] = models[key] is not None
            if op.type is BatchOperationType.UPDATE and not present[key]:
                raise StoreError(
                    f"Batch aborted: {op.collection} with id '{op.document_id}' not found"
                )
            if op.type is not BatchOperationType.DELETE:
                self._split(op.fields)
            present[key] = op.type is not BatchOperationType.DELETE

        # Apply pass.
        for op in operations:
            key = (op.collection, op.document_id)
            model = models[key]
            if op.type is BatchOperationType.CREATE:
                models[key] = self._stage_put(model, op.collection, op.document_id, op.fields)
            elif op.type is BatchOperationType.UPDATE:
                self._stage_update(model, op.fields)
            elif model is not None:
                if model in self._session.new:
                    self._session.expunge(model)
                else:
                    await self._session.delete(model)
                models[key] = None

        await self._flush()
        logger.debug("Committed batch of %d operation(s)", len(operations))
