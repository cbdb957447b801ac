"""Domain-specific exceptions — framework-independent."""


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class AccessDeniedError(EntityNotFoundError):
    """Raised when an entity exists but belongs to another caller.

    Subclasses EntityNotFoundError and carries the same message so that
    callers cannot tell "not yours" apart from "does not exist".
    """


class DuplicateEntityError(Exception):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class ValidationError(Exception):
    """Raised when input fails a business rule (shape, bounds, required fields)."""

    def __init__(self, message: str, field: str | None = None):
        self.message = message
        self.field = field
        super().__init__(message)


class AuthenticationError(Exception):
    """Raised when no verified caller identity is available."""


class StoreError(Exception):
    """Raised when the persistence layer fails (transport, serialization, batch)."""


class UnsupportedOperatorError(StoreError):
    """Raised when a document query uses an unknown comparison operator."""

    def __init__(self, operator: str):
        self.operator = operator
        super().__init__(f"Unsupported query operator: '{operator}'")
