from .document_store import (
    BatchOperation,
    BatchOperationType,
    Document,
    DocumentStore,
    QueryOperator,
)
from .file_storage import FileStorage
from .identity_provider import IdentityProvider
from .user_repository import UserRepository

__all__ = [
    "BatchOperation",
    "BatchOperationType",
    "Document",
    "DocumentStore",
    "QueryOperator",
    "FileStorage",
    "IdentityProvider",
    "UserRepository",
]
