"""Viewer rating resolution.

Decides whether a "submit review" action should create a new top-level
comment or update the viewer's existing one. The result is advisory: the
feed does not enforce one rating per user, and a second tab can race it.
"""

from dataclasses import dataclass
from typing import Iterable

from tasting.domain.model import Comment
from tasting.domain.value import RecipeRef, ReviewIntent, UserId


@dataclass(frozen=True)
class ReviewResolution:
    """Outcome of resolving a viewer's review intent."""

    intent: ReviewIntent
    existing: Comment | None = None


def find_viewer_comment(
    top_level: Iterable[Comment], viewer_id: UserId | None
) -> Comment | None:
    """Return the viewer's first top-level comment in feed order.

    Args:
        top_level: Top-level comments, newest first
        viewer_id: The viewer, or None when signed out

    Returns:
        The viewer's existing comment, or None
    """
    if viewer_id is None:
        return None
    return next(
        (c for c in top_level if c.parent_id is None and c.author_id == viewer_id),
        None,
    )


def resolve_review_intent(
    top_level: Iterable[Comment], recipe: RecipeRef, viewer_id: UserId | None
) -> ReviewResolution:
    """Route a review submission to create, update, or comment-only.

    The recipe owner may comment but never reviews their own recipe, so
    owners always get COMMENT_ONLY, with their existing comment if any.
    """
    existing = find_viewer_comment(top_level, viewer_id)
    if recipe.is_owner(viewer_id):
        return ReviewResolution(intent=ReviewIntent.COMMENT_ONLY, existing=existing)
    if existing is not None:
        return ReviewResolution(intent=ReviewIntent.UPDATE, existing=existing)
    return ReviewResolution(intent=ReviewIntent.CREATE)
