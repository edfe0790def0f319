"""Shared response envelope and base models."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Model whose JSON field names are camelCase (``completedQuiz``)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every endpoint."""

    success: bool = Field(default=True)
    message: str | None = Field(default=None)
    data: T | None = Field(default=None)


class MessageResponse(BaseModel):
    success: bool = True
    message: str
