"""Liveness probe. Needs no caller identity and touches no storage."""

from datetime import datetime, timezone

from fastapi import APIRouter

from circuit_backend.config import get_settings

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict:
    settings = get_settings()
    return {
        "status": "healthy",
        "service": settings.app_title,
        "version": settings.app_version,
        "environment": settings.app_env,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
