"""Discussion use cases."""

from .get_discussion import (
    CommentItem,
    GetDiscussionRequest,
    GetDiscussionResponse,
    GetDiscussionUseCase,
    ThreadItem,
)
from .open_discussion import OpenDiscussionRequest, OpenDiscussionUseCase

__all__ = [
    "CommentItem",
    "GetDiscussionRequest",
    "GetDiscussionResponse",
    "GetDiscussionUseCase",
    "OpenDiscussionRequest",
    "OpenDiscussionUseCase",
    "ThreadItem",
]
