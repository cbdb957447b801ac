"""Logging setup for the API process.

Every logger belongs to a category (SQL, outbound HTTP, uvicorn, record
services, auth) whose level comes from its own setting, so a noisy
category can be turned down without touching the rest.

Usage:
    from circuit_backend.infrastructure.logging.log_config import setup_logging
    setup_logging()   # once, from the FastAPI lifespan
"""

import logging
import sys

from circuit_backend.config import Settings, get_settings

_HANDLER_NAME = "circuit_backend.console"
_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

# Settings field → logger names it controls
LOG_CATEGORIES: dict[str, tuple[str, ...]] = {
    "log_level_sql": ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite", "asyncpg"),
    "log_level_http": ("httpx", "httpcore"),
    "log_level_uvicorn": ("uvicorn", "uvicorn.access", "uvicorn.error"),
    "log_level_services": (
        "circuit_backend.application.services",
        "circuit_backend.infrastructure.documents",
        "circuit_backend.infrastructure.storage",
    ),
    "log_level_auth": (
        "circuit_backend.infrastructure.identity",
        "circuit_backend.presentation.api.caller",
    ),
}


def parse_level(raw: str | None, default: int = logging.INFO) -> int:
    """``"debug"`` → ``logging.DEBUG``; unknown names fall back to ``default``."""
    level = logging.getLevelName((raw or "").strip().upper())
    return level if isinstance(level, int) else default


def category_levels(settings: Settings) -> dict[str, int]:
    """Resolve the configured level for every categorised logger name."""
    levels: dict[str, int] = {}
    for field_name, logger_names in LOG_CATEGORIES.items():
        level = parse_level(getattr(settings, field_name, None))
        for name in logger_names:
            levels[name] = level
    return levels


def setup_logging(settings: Settings | None = None) -> None:
    """Apply root and per-category levels. Safe to call more than once."""
    settings = settings or get_settings()

    root = logging.getLogger()
    root.setLevel(parse_level(settings.log_level))

    # uvicorn installs its own handlers; plain scripts and tests get ours.
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)

    for name, level in category_levels(settings).items():
        logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).debug(
        "Logging configured (root=%s, sql=%s, http=%s, services=%s, auth=%s)",
        settings.log_level,
        settings.log_level_sql,
        settings.log_level_http,
        settings.log_level_services,
        settings.log_level_auth,
    )
