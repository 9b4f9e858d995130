"""Derived rating figures for a recipe."""

from pydantic import Field

from tasting.domain.model.comment import Comment
from tasting.domain.model.common import DomainModel
from tasting.domain.value import MAX_RATING, MIN_RATING


def empty_distribution() -> dict[int, int]:
    return {star: 0 for star in range(MIN_RATING, MAX_RATING + 1)}


class RatingSummary(DomainModel):
    """Average and count of eligible ratings.

    ``average_rating`` is a plain mean with no rounding; it is 0.0 when
    there are no eligible ratings.
    """

    average_rating: float = 0.0
    total_ratings: int = Field(default=0, ge=0)


class CommentStats(DomainModel):
    """Summary statistics for a recipe discussion."""

    total_comments: int = Field(default=0, ge=0)  # Top-level only
    total_replies: int = Field(default=0, ge=0)
    average_rating: float = 0.0
    total_ratings: int = Field(default=0, ge=0)
    rating_distribution: dict[int, int] = Field(default_factory=empty_distribution)


class CommentThread(DomainModel):
    """A top-level comment with its direct replies, newest first."""

    comment: Comment
    replies: tuple[Comment, ...] = ()

    @property
    def reply_count(self) -> int:
        return len(self.replies)
