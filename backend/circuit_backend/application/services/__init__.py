from .owned_record_service import OwnedRecordService
from .project_service import ProjectService
from .template_service import TemplateService
from .circuit_service import CircuitService
from .auth_service import AuthService
from .storage_service import StorageService

__all__ = [
    "OwnedRecordService",
    "ProjectService",
    "TemplateService",
    "CircuitService",
    "AuthService",
    "StorageService",
]
