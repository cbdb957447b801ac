"""Caller identity resolution for protected routes.

Controllers only need to know *who* is calling; how that identity is
established is pluggable:

* ``BearerTokenCallerResolver`` — ``Authorization: Bearer <id token>``,
  verified by the identity provider (production).
* ``HeaderCallerResolver`` — trusts a plain header such as ``X-User-ID``
  (local development and tests only).
"""

import logging
from abc import ABC, abstractmethod

from fastapi import Depends, Request

from circuit_backend.config import get_settings
from circuit_backend.application.interfaces import IdentityProvider
from circuit_backend.domain.exceptions import AuthenticationError
from circuit_backend.infrastructure.dependencies import get_identity_provider

logger = logging.getLogger(__name__)


class CallerResolver(ABC):
    """Port for turning an incoming request into a caller id."""

    @abstractmethod
    async def resolve(self, request: Request) -> str | None:
        """Return the caller id, or None when the request carries no identity."""
        ...


class BearerTokenCallerResolver(CallerResolver):
    def __init__(self, identity_provider: IdentityProvider):
        self._identity_provider = identity_provider

    async def resolve(self, request: Request) -> str | None:
        header = request.headers.get("Authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None
        identity = await self._identity_provider.verify_token(token.strip())
        return identity.uid


class HeaderCallerResolver(CallerResolver):
    def __init__(self, header_name: str = "X-User-ID"):
        self._header_name = header_name

    async def resolve(self, request: Request) -> str | None:
        value = request.headers.get(self._header_name, "").strip()
        return value or None


def get_caller_resolver(
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> CallerResolver:
    """Selects the resolver from AUTH_MODE."""
    settings = get_settings()
    if settings.auth_mode.strip().lower() == "header":
        return HeaderCallerResolver(settings.caller_header)
    return BearerTokenCallerResolver(identity_provider)


async def get_current_caller(
    request: Request,
    resolver: CallerResolver = Depends(get_caller_resolver),
) -> str:
    """FastAPI dependency — the verified caller id; 401 when absent."""
    caller_id = await resolver.resolve(request)
    if not caller_id:
        logger.debug("Rejected %s %s: no caller identity", request.method, request.url.path)
        raise AuthenticationError("Authentication required")
    return caller_id
