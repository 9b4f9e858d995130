"""Test configuration and fixtures."""

from datetime import datetime, timedelta
from itertools import count

import logfire

from tasting.domain.model import Comment
from tasting.domain.value import (
    CommentId,
    Handle,
    RecipeId,
    RecipeRef,
    UserId,
    Viewer,
)

# Keep spans local and quiet during tests
logfire.configure(send_to_logfire=False, console=False)

RECIPE_ID = RecipeId("recipe-1")
OWNER_ID = UserId("owner")

_clock = count()
_BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


def make_recipe(
    recipe_id: str = RECIPE_ID, owner_id: str = OWNER_ID
) -> RecipeRef:
    return RecipeRef(recipe_id=RecipeId(recipe_id), owner_id=UserId(owner_id))


def make_viewer(user_id: str = "u1") -> Viewer:
    return Viewer(user_id=UserId(user_id), display=Handle(f"{user_id}@example.com"))


def make_comment(
    comment_id: str,
    author_id: str = "u1",
    rating: int | None = None,
    parent_id: str | None = None,
    recipe_id: str = RECIPE_ID,
    text: str | None = None,
    created_at: datetime | None = None,
) -> Comment:
    """Build a stored comment.

    Each call gets a later timestamp than the previous one unless
    ``created_at`` is given, so comments built in order are oldest first.
    """
    return Comment(
        id=CommentId(comment_id),
        recipe_id=RecipeId(recipe_id),
        author_id=UserId(author_id),
        author_display=Handle(f"{author_id}@example.com"),
        text=text or f"Comment {comment_id}",
        rating=rating,
        created_at=created_at or _BASE_TIME + timedelta(seconds=next(_clock)),
        parent_id=CommentId(parent_id) if parent_id else None,
        is_owner_reply=author_id == OWNER_ID,
    )


def newest_first(*comments: Comment) -> list[Comment]:
    """Order comments the way the feed delivers them."""
    return sorted(comments, key=lambda c: c.created_at, reverse=True)
