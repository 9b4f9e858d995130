"""Full-snapshot delivery from the comment feed."""

from datetime import datetime

from pydantic import Field

from tasting.domain.model.comment import Comment
from tasting.domain.model.common import DomainModel
from tasting.domain.value import RecipeId


class CommentSnapshot(DomainModel):
    """Every comment of one recipe at one point in the feed's history.

    Comments are ordered newest first. A snapshot always replaces the
    previous one; there is no diff form.
    """

    recipe_id: RecipeId
    comments: tuple[Comment, ...] = ()
    sequence: int = Field(default=0, ge=0)  # Monotonic per subscription
    delivered_at: datetime = Field(default_factory=datetime.now)
