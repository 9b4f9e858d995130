"""Domain model entities for recipe discussions."""

from tasting.domain.model.comment import Comment, CommentDraft, CommentPatch
from tasting.domain.model.rating import CommentStats, CommentThread, RatingSummary
from tasting.domain.model.snapshot import CommentSnapshot

__all__ = [
    "Comment",
    "CommentDraft",
    "CommentPatch",
    "CommentSnapshot",
    "CommentStats",
    "CommentThread",
    "RatingSummary",
]
