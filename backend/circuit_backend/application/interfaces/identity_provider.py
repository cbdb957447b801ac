"""Abstract identity provider interface (port)."""

from abc import ABC, abstractmethod

from circuit_backend.domain.entities import VerifiedIdentity


class IdentityProvider(ABC):
    """Port for the external identity provider that verifies bearer credentials."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        ...

    @abstractmethod
    async def verify_token(self, token: str) -> VerifiedIdentity:
        """Verify an ID token and return the caller's identity.

        Raises AuthenticationError if the token is invalid or expired.
        """
        ...
