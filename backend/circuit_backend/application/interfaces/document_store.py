"""Abstract document store interface (port) — schemaless records in named collections."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from circuit_backend.domain.exceptions import UnsupportedOperatorError

Document = dict[str, Any]


class QueryOperator(str, Enum):
    """Comparison operators supported by ``DocumentStore.query``."""

    EQ = "eq"
    NEQ = "neq"
    LT = "lt"
    LTE = "lte"
    GT = "gt"
    GTE = "gte"
    IN = "in"
    CONTAINS = "contains"

    @classmethod
    def parse(cls, raw: "str | QueryOperator") -> "QueryOperator":
        """Resolve an operator name or symbolic alias (``==``, ``array-contains``...)."""
        if isinstance(raw, cls):
            return raw
        key = str(raw).strip().lower()
        try:
            return cls(_ALIASES.get(key, key))
        except ValueError:
            raise UnsupportedOperatorError(str(raw)) from None


_ALIASES: dict[str, str] = {
    "==": "eq",
    "!=": "neq",
    "<": "lt",
    "<=": "lte",
    ">": "gt",
    ">=": "gte",
    "array-contains": "contains",
}


class BatchOperationType(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass
class BatchOperation:
    """A single write inside an atomic ``DocumentStore.batch`` call."""

    type: BatchOperationType
    collection: str
    document_id: str
    fields: Document = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.type = BatchOperationType(self.type)


class DocumentStore(ABC):
    """Port for document persistence — implemented in the infrastructure layer.

    Returned documents always carry ``id``, ``createdAt`` and ``updatedAt``.
    ``delete`` is idempotent: removing an absent document is not an error.
    """

    @abstractmethod
    async def put(self, collection: str, document_id: str, fields: Document) -> None:
        """Create or overwrite a document under a caller-chosen id."""
        ...

    @abstractmethod
    async def insert(self, collection: str, fields: Document) -> str:
        """Store a new document under a generated id and return that id."""
        ...

    @abstractmethod
    async def get(self, collection: str, document_id: str) -> Document:
        """Return a document. Raises EntityNotFoundError if absent."""
        ...

    @abstractmethod
    async def update_fields(
        self, collection: str, document_id: str, fields: Document
    ) -> None:
        """Merge top-level fields into an existing document. Raises EntityNotFoundError if absent."""
        ...

    @abstractmethod
    async def delete(self, collection: str, document_id: str) -> None:
        """Remove a document if present."""
        ...

    @abstractmethod
    async def query(
        self,
        collection: str,
        field_name: str,
        operator: str | QueryOperator,
        value: Any,
    ) -> list[Document]:
        """Return every document whose field matches the predicate."""
        ...

    @abstractmethod
    async def batch(self, operations: list[BatchOperation]) -> None:
        """Apply all operations or none of them. Raises StoreError on any failure."""
        ...
