"""Domain services."""

from .base import Service
from .comment_service import CommentService
from .identity import IdentityProvider
from .rating import comment_stats, is_eligible_rating, summarize_ratings
from .resolver import ReviewResolution, find_viewer_comment, resolve_review_intent
from .thread import ThreadView, partition

__all__ = [
    "CommentService",
    "IdentityProvider",
    "ReviewResolution",
    "Service",
    "ThreadView",
    "comment_stats",
    "find_viewer_comment",
    "is_eligible_rating",
    "partition",
    "resolve_review_intent",
    "summarize_ratings",
]
