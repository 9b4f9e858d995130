"""Repository interfaces for the discussion domain.

Interfaces are defined in the domain layer (dependency inversion).
Implementations live in the persistence layer.
"""

from tasting.domain.repository.comment_feed import CommentFeed, FeedSubscription
from tasting.domain.repository.rating_summary import RatingSummaryRepository

__all__ = [
    "CommentFeed",
    "FeedSubscription",
    "RatingSummaryRepository",
]
