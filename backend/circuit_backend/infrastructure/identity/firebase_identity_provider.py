"""Firebase Authentication client — implements the IdentityProvider interface.

Verifies ID tokens through the Identity Toolkit REST API
(``accounts:lookup``), which answers with the account behind a valid,
unexpired token and with an error for anything else.
"""

import logging
from typing import Any

import httpx

from circuit_backend.application.interfaces import IdentityProvider
from circuit_backend.domain.entities import VerifiedIdentity
from circuit_backend.domain.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

# Firebase sign-in provider ids → provider names stored on users
_PROVIDER_NAMES = {
    "google.com": "google",
    "password": "email",
}


class FirebaseIdentityProvider(IdentityProvider):
    """Infrastructure adapter — verifies Firebase ID tokens over HTTPS."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://identitytoolkit.googleapis.com/v1",
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._http_client = http_client

    @property
    def provider_name(self) -> str:
        return "firebase"

    async def _get_client(self) -> httpx.AsyncClient:
        """Return the injected client or create a short-lived one."""
        if self._http_client is not None:
            return self._http_client
        return httpx.AsyncClient(timeout=10.0)

    async def verify_token(self, token: str) -> VerifiedIdentity:
        if not token or not token.strip():
            raise AuthenticationError("Missing ID token")
        if not self._api_key:
            raise AuthenticationError("Identity provider is not configured")

        url = f"{self._base_url}/accounts:lookup"
        client = await self._get_client()
        should_close = self._http_client is None

        try:
            response = await client.post(
                url, params={"key": self._api_key}, json={"idToken": token}
            )
        except httpx.HTTPError as exc:
            logger.error("Identity provider request failed: %s", exc)
            raise AuthenticationError("Could not verify ID token") from exc
        finally:
            if should_close:
                await client.aclose()

        if response.status_code != 200:
            logger.info(
                "Rejected ID token (status %d): %s",
                response.status_code,
                self._error_message(response),
            )
            raise AuthenticationError("Invalid or expired ID token")

        try:
            users = response.json().get("users") or []
        except ValueError as exc:
            raise AuthenticationError("Malformed identity provider response") from exc
        if not users:
            raise AuthenticationError("Invalid or expired ID token")
        return self._parse_account(users[0])

    @staticmethod
    def _parse_account(account: dict[str, Any]) -> VerifiedIdentity:
        uid = account.get("localId")
        if not uid:
            raise AuthenticationError("Identity provider returned no user id")

        provider_infos = account.get("providerUserInfo") or []
        provider_id = provider_infos[0].get("providerId", "") if provider_infos else ""

        return VerifiedIdentity(
            uid=uid,
            email=account.get("email", ""),
            display_name=account.get("displayName", ""),
            photo_url=account.get("photoUrl", ""),
            provider=_PROVIDER_NAMES.get(provider_id, provider_id),
        )

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            return response.json().get("error", {}).get("message", "")
        except ValueError:
            return response.text[:200]
