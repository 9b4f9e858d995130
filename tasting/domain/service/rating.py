"""Rating aggregation.

A rating counts toward a recipe's figures only when it sits on a top-level
comment that was not written by the recipe owner. Every function here
filters on all three conditions itself and never trusts the caller to have
removed replies.
"""

from typing import Iterable

from tasting.domain.model import Comment, CommentStats, RatingSummary
from tasting.domain.model.rating import empty_distribution
from tasting.domain.value import UserId


def is_eligible_rating(comment: Comment, owner_id: UserId) -> bool:
    """Whether a comment's rating counts toward the recipe's aggregate."""
    return (
        comment.parent_id is None
        and comment.rating is not None
        and comment.author_id != owner_id
    )


def eligible_ratings(comments: Iterable[Comment], owner_id: UserId) -> list[int]:
    return [c.rating for c in comments if is_eligible_rating(c, owner_id)]


def summarize_ratings(comments: Iterable[Comment], owner_id: UserId) -> RatingSummary:
    """Compute the average and count of eligible ratings.

    Recomputed from scratch on each call so the result always matches the
    comments passed in, including after deletions.

    Args:
        comments: Comments of one recipe (replies are ignored)
        owner_id: The recipe owner, whose ratings are excluded

    Returns:
        Rating summary; average is 0.0 when nothing is eligible
    """
    ratings = eligible_ratings(comments, owner_id)
    if not ratings:
        return RatingSummary(average_rating=0.0, total_ratings=0)
    return RatingSummary(
        average_rating=sum(ratings) / len(ratings),
        total_ratings=len(ratings),
    )


def comment_stats(comments: Iterable[Comment], owner_id: UserId) -> CommentStats:
    """Compute discussion statistics including a 1-5 star histogram.

    Uses the same eligibility rule as ``summarize_ratings`` so the
    histogram always adds up to ``total_ratings``.
    """
    ordered = list(comments)
    ratings = eligible_ratings(ordered, owner_id)

    distribution = empty_distribution()
    for rating in ratings:
        distribution[rating] += 1

    summary = summarize_ratings(ordered, owner_id)
    return CommentStats(
        total_comments=sum(1 for c in ordered if c.parent_id is None),
        total_replies=sum(1 for c in ordered if c.parent_id is not None),
        average_rating=summary.average_rating,
        total_ratings=summary.total_ratings,
        rating_distribution=distribution,
    )
