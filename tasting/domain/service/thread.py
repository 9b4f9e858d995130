"""Two-level thread partitioning.

A flat, feed-ordered list of comments is split into top-level comments,
replies grouped under their parent, and orphans: replies whose parent is not
in the list (deleted, not yet delivered, or itself a reply). Orphans are
never shown under any parent.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Iterable

from tasting.domain.model import Comment, CommentThread
from tasting.domain.value import CommentId


@dataclass(frozen=True)
class ThreadView:
    """Partitioned view over one snapshot.

    Every comment of the snapshot appears in exactly one of ``top_level``,
    one parent's entry in ``replies``, or ``orphans``. Feed order is kept
    within each group.
    """

    comments: tuple[Comment, ...] = ()  # Whole snapshot, feed order
    top_level: tuple[Comment, ...] = ()
    replies: dict[CommentId, tuple[Comment, ...]] = field(default_factory=dict)
    orphans: tuple[Comment, ...] = ()

    def find(self, comment_id: CommentId) -> Comment | None:
        return next((c for c in self.comments if c.id == comment_id), None)

    def replies_of(self, comment_id: CommentId) -> tuple[Comment, ...]:
        """Replies of a top-level comment; empty for any other id."""
        return self.replies.get(comment_id, ())

    def reply_count(self, comment_id: CommentId) -> int:
        return len(self.replies_of(comment_id))

    def threads(self) -> list[CommentThread]:
        """Group each top-level comment with its replies."""
        return [
            CommentThread(comment=comment, replies=self.replies_of(comment.id))
            for comment in self.top_level
        ]

    @property
    def size(self) -> int:
        return len(self.comments)


def partition(comments: Iterable[Comment]) -> ThreadView:
    """Partition a feed-ordered list of comments into a ThreadView.

    Args:
        comments: Comments of one recipe, newest first

    Returns:
        Partitioned view preserving the input order within each group
    """
    ordered = list(comments)
    top_level = tuple(c for c in ordered if c.parent_id is None)
    top_ids = {c.id for c in top_level}

    grouped: dict[CommentId, list[Comment]] = defaultdict(list)
    orphans: list[Comment] = []
    for comment in ordered:
        if comment.parent_id is None:
            continue
        if comment.parent_id in top_ids:
            grouped[comment.parent_id].append(comment)
        else:
            orphans.append(comment)

    return ThreadView(
        comments=tuple(ordered),
        top_level=top_level,
        replies={parent_id: tuple(replies) for parent_id, replies in grouped.items()},
        orphans=tuple(orphans),
    )
