"""Comment feed implementations."""

from .inmemory import InMemoryCommentFeed
from .sql import SqlCommentFeed
from .subscription import QueueSubscription

__all__ = [
    "InMemoryCommentFeed",
    "QueueSubscription",
    "SqlCommentFeed",
]
