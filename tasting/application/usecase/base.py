"""Base use case and shared request shape."""

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

from tasting.domain.value import RecipeId, RecipeRef, UserId

RequestT = TypeVar("RequestT")
ResponseT = TypeVar("ResponseT")


class RecipeRequest(BaseModel):
    """Request addressed to one recipe's discussion."""

    recipe_id: str
    owner_id: str

    def recipe_ref(self) -> RecipeRef:
        return RecipeRef(
            recipe_id=RecipeId(self.recipe_id), owner_id=UserId(self.owner_id)
        )


class BaseUseCase(ABC, Generic[RequestT, ResponseT]):
    """Base use case for orchestrating domain services."""

    @abstractmethod
    async def execute(self, request: RequestT) -> ResponseT:
        pass
