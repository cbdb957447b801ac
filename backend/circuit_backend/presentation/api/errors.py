"""Maps domain exceptions to HTTP responses in the API envelope.

Services raise framework-independent exceptions; this is the only place
that knows about status codes.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from circuit_backend.domain.exceptions import (
    AuthenticationError,
    DuplicateEntityError,
    EntityNotFoundError,
    StoreError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, error: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": error or message},
    )


async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, exc.message)


async def _duplicate_error(request: Request, exc: DuplicateEntityError) -> JSONResponse:
    return error_response(status.HTTP_409_CONFLICT, str(exc))


async def _authentication_error(request: Request, exc: AuthenticationError) -> JSONResponse:
    return error_response(
        status.HTTP_401_UNAUTHORIZED, "Authentication required", str(exc) or None
    )


async def _not_found_error(request: Request, exc: EntityNotFoundError) -> JSONResponse:
    # AccessDeniedError lands here too and must read exactly the same.
    return error_response(status.HTTP_404_NOT_FOUND, f"{exc.entity_type} not found")


async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Storage failure")


async def _request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, message)


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail), "error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ValidationError, _validation_error)
    app.add_exception_handler(DuplicateEntityError, _duplicate_error)
    app.add_exception_handler(AuthenticationError, _authentication_error)
    app.add_exception_handler(EntityNotFoundError, _not_found_error)
    app.add_exception_handler(StoreError, _store_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
