"""Domain value objects for recipe discussions."""

from tasting.domain.value.identifiers import CommentId, RecipeId, UserId
from tasting.domain.value.types import (
    MAX_RATING,
    MIN_RATING,
    DeletePolicy,
    Handle,
    Rating,
    RecipeRef,
    ReviewIntent,
    Viewer,
)

__all__ = [
    # Identifiers
    "CommentId",
    "RecipeId",
    "UserId",
    # Types
    "MAX_RATING",
    "MIN_RATING",
    "DeletePolicy",
    "Handle",
    "Rating",
    "RecipeRef",
    "ReviewIntent",
    "Viewer",
]
