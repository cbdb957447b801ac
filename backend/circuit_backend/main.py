"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from circuit_backend.config import Settings, get_settings
from circuit_backend.infrastructure.database import Base, engine
from circuit_backend.infrastructure.logging.log_config import setup_logging
from circuit_backend.presentation.api.errors import register_exception_handlers
from circuit_backend.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup: logging, relational tables (users + documents), upload root."""
    settings = get_settings()
    setup_logging(settings)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    logger.info(
        "%s %s ready (env=%s, document store=%s, auth=%s)",
        settings.app_title,
        settings.app_version,
        settings.app_env,
        settings.document_store_backend,
        settings.auth_mode,
    )
    try:
        yield
    finally:
        await engine.dispose()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API: CORS for the web client, /api/v1 routes, domain error mapping."""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", settings.caller_header],
    )
    app.include_router(api_router)
    register_exception_handlers(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("circuit_backend.main:app", host="0.0.0.0", port=8080, reload=True)
