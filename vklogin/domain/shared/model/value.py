"""Immutable building blocks for domain models."""

from typing import Generic, TypeVar
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, RootModel
from typing_extensions import Self

T = TypeVar("T")


class ValueObject(BaseModel):
    model_config = ConfigDict(frozen=True)


class RootValueObject(RootModel[T], Generic[T]):
    model_config = ConfigDict(frozen=True)


class Identifier(RootValueObject[UUID]):
    """UUID identity. Stored and rendered as the bare UUID string."""

    @classmethod
    def generate(cls) -> Self:
        return cls(uuid4())

    def __str__(self) -> str:
        return str(self.root)

    def __hash__(self) -> int:
        return hash(self.root)
