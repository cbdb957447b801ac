"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from circuit_backend.presentation.api.v1.endpoints.health import router as health_router
from circuit_backend.presentation.api.v1.auth_controller import router as auth_router
from circuit_backend.presentation.api.v1.projects_controller import router as projects_router
from circuit_backend.presentation.api.v1.circuits_controller import router as circuits_router
from circuit_backend.presentation.api.v1.storage_controller import router as storage_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(auth_router)
router.include_router(projects_router)
router.include_router(circuits_router)
router.include_router(storage_router)
