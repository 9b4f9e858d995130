"""Domain value objects for recipe discussions.

Value objects are immutable and defined by their values, not identity.
They encapsulate validation rules and small pieces of business logic.
"""

from enum import Enum
from typing import Annotated

from pydantic import Field, field_validator

from tasting.domain.value.common import RootValueObject, ValueObject
from tasting.domain.value.identifiers import RecipeId, UserId

MIN_RATING = 1
MAX_RATING = 5

# Star rating carried by a top-level comment
Rating = Annotated[int, Field(ge=MIN_RATING, le=MAX_RATING, strict=True)]


class DeletePolicy(str, Enum):
    """What happens to the replies of a deleted top-level comment."""

    ORPHAN = "orphan"
    CASCADE = "cascade"


class ReviewIntent(str, Enum):
    """What a "submit review" action should do for the current viewer."""

    CREATE = "create"
    UPDATE = "update"
    COMMENT_ONLY = "comment_only"


class Handle(RootValueObject[str]):
    """Human-readable author identity shown next to a comment.

    Usually an email address or a provider handle.
    """

    @field_validator("root")
    @classmethod
    def validate_handle(cls, v: str) -> str:
        """Validate handle is not blank and within length limits."""
        if not v.strip() or len(v) > 255:
            raise ValueError("Handle must be 1-255 characters")
        return v


class RecipeRef(ValueObject):
    """The recipe a discussion belongs to.

    Ownership is a property of the recipe, not of the discussion, so the
    owner id travels with the recipe reference.
    """

    recipe_id: RecipeId
    owner_id: UserId

    def is_owner(self, user_id: UserId | None) -> bool:
        """Return True when ``user_id`` authored the recipe."""
        return user_id is not None and user_id == self.owner_id


class Viewer(ValueObject):
    """The currently signed-in actor."""

    user_id: UserId
    display: Handle
    avatar_url: str | None = None
