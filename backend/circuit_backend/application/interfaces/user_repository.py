"""Abstract repository interface (port) for User persistence."""

from abc import ABC, abstractmethod

from circuit_backend.domain.entities import User


class UserRepository(ABC):
    """Port for user persistence — implemented in the infrastructure layer."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None:
        """Retrieve a user by identity-provider UID."""
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        ...

    @abstractmethod
    async def get_all(self) -> list[User]:
        """Retrieve all users, newest first."""
        ...

    @abstractmethod
    async def create(self, user: User) -> User:
        """Persist a new user. Raises DuplicateEntityError if the id is taken."""
        ...

    @abstractmethod
    async def update(self, user: User) -> User:
        """Update an existing user's mutable fields."""
        ...

    @abstractmethod
    async def delete(self, user_id: str) -> bool:
        """Delete a user. Returns True if deleted, False if not found."""
        ...

    @abstractmethod
    async def exists(self, user_id: str) -> bool:
        ...
