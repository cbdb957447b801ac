"""Response envelope shared by every API route."""

from typing import Generic, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class ApiResponse(BaseModel, Generic[DataT]):
    """``{success, message, data?, error?}`` wrapper returned to the client."""

    success: bool
    message: str
    data: DataT | None = None
    error: str | None = None

    @classmethod
    def ok(cls, message: str, data: DataT | None = None) -> "ApiResponse[DataT]":
        return cls(success=True, message=message, data=data)
