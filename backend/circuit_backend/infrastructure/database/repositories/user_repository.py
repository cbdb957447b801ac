"""Concrete repository implementation for User backed by SQLAlchemy."""

from sqlalchemy import exists as sql_exists
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from circuit_backend.application.interfaces import UserRepository
from circuit_backend.domain.entities import User
from circuit_backend.domain.exceptions import DuplicateEntityError
from circuit_backend.infrastructure.database.models import UserModel


class SQLAlchemyUserRepository(UserRepository):
    """Implements the UserRepository port using SQLAlchemy async sessions."""

    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_entity(self, model: UserModel) -> User:
        """Map ORM model → domain entity."""
        return User(
            id=model.id,
            email=model.email,
            display_name=model.display_name,
            photo_url=model.photo_url,
            provider=model.provider,
            created_at=model.created_at,
            updated_at=model.updated_at,
            last_login_at=model.last_login_at,
        )

    def _to_model(self, entity: User) -> UserModel:
        """Map domain entity → ORM model (for creation)."""
        return UserModel(
            id=entity.id,
            email=entity.email,
            display_name=entity.display_name,
            photo_url=entity.photo_url,
            provider=entity.provider,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            last_login_at=entity.last_login_at,
        )

    async def get_by_id(self, user_id: str) -> User | None:
        result = await self._session.get(UserModel, user_id)
        return self._to_entity(result) if result else None

    async def get_by_email(self, email: str) -> User | None:
        result = await self._session.execute(
            select(UserModel).where(UserModel.email == email)
        )
        model = result.scalars().first()
        return self._to_entity(model) if model else None

    async def get_all(self) -> list[User]:
        result = await self._session.execute(
            select(UserModel).order_by(UserModel.created_at.desc())
        )
        return [self._to_entity(row) for row in result.scalars().all()]

    async def create(self, user: User) -> User:
        if await self._session.get(UserModel, user.id) is not None:
            raise DuplicateEntityError("User", "id", user.id)
        model = self._to_model(user)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as exc:
            raise DuplicateEntityError("User", "id", user.id) from exc
        return self._to_entity(model)

    async def update(self, user: User) -> User:
        model = await self._session.get(UserModel, user.id)
        if model is None:
            raise ValueError(f"User {user.id} not found in database")
        model.email = user.email
        model.display_name = user.display_name
        model.photo_url = user.photo_url
        model.provider = user.provider
        model.updated_at = user.updated_at
        model.last_login_at = user.last_login_at
        await self._session.flush()
        return self._to_entity(model)

    async def delete(self, user_id: str) -> bool:
        model = await self._session.get(UserModel, user_id)
        if model is None:
            return False
        await self._session.delete(model)
        await self._session.flush()
        return True

    async def exists(self, user_id: str) -> bool:
        result = await self._session.execute(
            select(sql_exists().where(UserModel.id == user_id))
        )
        return bool(result.scalar())
