from .owned_record import OwnedRecord, Project, Circuit
from .user import User, VerifiedIdentity
from .template import CircuitTemplate
from .stored_object import StoredObject

__all__ = [
    "OwnedRecord",
    "Project",
    "Circuit",
    "User",
    "VerifiedIdentity",
    "CircuitTemplate",
    "StoredObject",
]
