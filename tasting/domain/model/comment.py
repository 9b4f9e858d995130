"""Comment entity.

Discussions on a recipe are two levels deep: top-level comments, which may
carry a star rating, and replies to them, which never do.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from tasting.domain.model.common import DomainModel
from tasting.domain.value import CommentId, Handle, Rating, RecipeId, UserId


class Comment(DomainModel):
    """Comment entity as delivered by the comment feed.

    Threading is managed through ``parent_id`` only: None for a top-level
    comment, the id of a top-level comment for a reply.

    Records are parsed as stored. A reply carrying a rating is not rejected
    here; consumers that aggregate ratings filter replies themselves.
    """

    id: CommentId
    recipe_id: RecipeId
    author_id: UserId
    author_display: Handle
    author_avatar: Optional[str] = None
    text: str = Field(min_length=1)
    rating: Optional[Rating] = None
    created_at: datetime = Field(default_factory=datetime.now)
    parent_id: Optional[CommentId] = None
    is_owner_reply: bool = False  # Fixed at write time

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    @property
    def is_top_level(self) -> bool:
        return self.parent_id is None


class CommentDraft(DomainModel):
    """A comment about to be written to the feed.

    The feed assigns the id. Everything else is fixed by the writer,
    including ``is_owner_reply`` so that historical replies keep their
    authorship context if recipe ownership later changes.
    """

    recipe_id: RecipeId
    author_id: UserId
    author_display: Handle
    author_avatar: Optional[str] = None
    text: str = Field(min_length=1)
    rating: Optional[Rating] = None
    created_at: datetime = Field(default_factory=datetime.now)
    parent_id: Optional[CommentId] = None
    is_owner_reply: bool = False

    @model_validator(mode="after")
    def check_write_invariants(self) -> "CommentDraft":
        """Reject drafts that would break the stored-comment invariants."""
        if not self.text.strip():
            raise ValueError("Comment text must not be blank")
        if self.parent_id is not None and self.rating is not None:
            raise ValueError("Replies cannot carry a rating")
        return self

    def to_comment(self, comment_id: CommentId) -> Comment:
        """Materialize the draft under a feed-assigned id."""
        return Comment(id=comment_id, **self.model_dump())


class CommentPatch(DomainModel):
    """Fields an author may overwrite on a top-level comment.

    A None rating clears the rating.
    """

    text: str = Field(min_length=1)
    rating: Optional[Rating] = None
