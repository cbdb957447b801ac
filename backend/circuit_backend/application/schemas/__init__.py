from .common import ApiResponse
from .project import ProjectCreate, ProjectDuplicate, ProjectResponse, ProjectUpdate
from .circuit import (
    CircuitCreate,
    CircuitFromTemplate,
    CircuitResponse,
    CircuitTemplateResponse,
    CircuitUpdate,
)
from .user import RegisterRequest, UserProfileUpdate, UserResponse
from .storage import FileUrlResponse, StoredFileResponse

__all__ = [
    "ApiResponse",
    "ProjectCreate",
    "ProjectDuplicate",
    "ProjectResponse",
    "ProjectUpdate",
    "CircuitCreate",
    "CircuitFromTemplate",
    "CircuitResponse",
    "CircuitTemplateResponse",
    "CircuitUpdate",
    "RegisterRequest",
    "UserProfileUpdate",
    "UserResponse",
    "FileUrlResponse",
    "StoredFileResponse",
]
