"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from datetime import datetime
from typing import Any, Dict

from tasting.domain.model import Comment, CommentDraft, RatingSummary
from tasting.domain.value import CommentId, Handle, RecipeId, UserId


def row_to_comment(row: Dict[str, Any]) -> Comment:
    """Convert database row to Comment domain model.

    Args:
        row: Database row as dict

    Returns:
        Comment domain model
    """
    return Comment(
        id=CommentId(row["id"]),
        recipe_id=RecipeId(row["recipe_id"]),
        author_id=UserId(row["author_id"]),
        author_display=Handle(row["author_display"]),
        author_avatar=row.get("author_avatar"),
        text=row["text"],
        rating=row.get("rating"),
        created_at=row["created_at"],
        parent_id=CommentId(row["parent_id"]) if row.get("parent_id") else None,
        is_owner_reply=bool(row.get("is_owner_reply", False)),
    )


def draft_to_dict(draft: CommentDraft, comment_id: CommentId) -> Dict[str, Any]:
    """Convert a CommentDraft to a database dict under its assigned id.

    Args:
        draft: Comment draft
        comment_id: Id assigned by the feed

    Returns:
        Dict suitable for database insertion
    """
    return {"id": comment_id, **draft.model_dump()}


def row_to_rating_summary(row: Dict[str, Any]) -> RatingSummary:
    """Convert database row to RatingSummary."""
    return RatingSummary(
        average_rating=row["average_rating"],
        total_ratings=row["total_ratings"],
    )


def rating_summary_to_dict(recipe_id: RecipeId, summary: RatingSummary) -> Dict[str, Any]:
    return {
        "recipe_id": recipe_id,
        **summary.model_dump(),
        "updated_at": datetime.now(),
    }
