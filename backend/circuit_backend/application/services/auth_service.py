"""Application service for user registration and profiles.

Identity is owned by the external identity provider; the relational user
store keeps the application's own copy of each profile.
"""

import logging

from circuit_backend.application.interfaces import IdentityProvider, UserRepository
from circuit_backend.domain.entities import User
from circuit_backend.domain.exceptions import EntityNotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "google"


class AuthService:
    """Registers verified identities as users and manages their profiles."""

    def __init__(self, identity_provider: IdentityProvider, repository: UserRepository):
        self._identity_provider = identity_provider
        self._repository = repository

    async def register(self, id_token: str, provider: str | None = None) -> tuple[User, bool]:
        """Verify the token and return ``(user, created)``.

        An already registered user is returned as-is apart from a refreshed
        ``last_login_at``.
        """
        if not id_token or not id_token.strip():
            raise ValidationError("ID token is required", field="id_token")

        identity = await self._identity_provider.verify_token(id_token)

        existing = await self._repository.get_by_id(identity.uid)
        if existing is not None:
            existing.touch_login()
            return await self._repository.update(existing), False

        user = User(
            id=identity.uid,
            email=identity.email,
            display_name=identity.display_name,
            photo_url=identity.photo_url,
            provider=provider or identity.provider or DEFAULT_PROVIDER,
        )
        user.touch_login()
        created = await self._repository.create(user)
        logger.info("Registered user %s via %s", created.id, created.provider)
        return created, True

    async def get_profile(self, user_id: str) -> User:
        user = await self._repository.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User", user_id)
        return user

    async def update_profile(
        self,
        user_id: str,
        display_name: str | None = None,
        photo_url: str | None = None,
    ) -> User:
        user = await self.get_profile(user_id)
        user.update_profile(display_name=display_name, photo_url=photo_url)
        return await self._repository.update(user)

    async def list_users(self) -> list[User]:
        return await self._repository.get_all()

    async def delete_account(self, user_id: str) -> None:
        if not await self._repository.delete(user_id):
            raise EntityNotFoundError("User", user_id)
        logger.info("Deleted user %s", user_id)
