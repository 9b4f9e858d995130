"""Get discussion use case."""

from datetime import datetime

import logfire
from pydantic import BaseModel

from tasting.application.usecase.base import BaseUseCase, RecipeRequest
from tasting.domain.model import Comment, CommentStats
from tasting.domain.service import (
    CommentService,
    IdentityProvider,
    comment_stats,
    partition,
    resolve_review_intent,
)
from tasting.domain.value import ReviewIntent


class CommentItem(BaseModel):
    """Comment item in response."""

    comment_id: str
    author_id: str
    author_display: str
    author_avatar: str | None
    text: str
    rating: int | None
    parent_id: str | None
    is_owner_reply: bool
    created_at: datetime

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentItem":
        return cls(
            comment_id=str(comment.id),
            author_id=str(comment.author_id),
            author_display=str(comment.author_display),
            author_avatar=comment.author_avatar,
            text=comment.text,
            rating=comment.rating,
            parent_id=str(comment.parent_id) if comment.parent_id else None,
            is_owner_reply=comment.is_owner_reply,
            created_at=comment.created_at,
        )


class ThreadItem(BaseModel):
    """Top-level comment with its replies, newest first."""

    comment: CommentItem
    replies: list[CommentItem]
    reply_count: int


class GetDiscussionRequest(RecipeRequest):
    """Get discussion request."""


class GetDiscussionResponse(BaseModel):
    """Get discussion response."""

    recipe_id: str
    threads: list[ThreadItem]
    stats: CommentStats
    viewer_comment_id: str | None  # Viewer's existing top-level comment
    review_intent: ReviewIntent


class GetDiscussionUseCase(BaseUseCase[GetDiscussionRequest, GetDiscussionResponse]):
    """Use case for reading a recipe's discussion once, without subscribing."""

    def __init__(
        self,
        comment_service: CommentService,
        identity_provider: IdentityProvider,
    ) -> None:
        """Initialize get discussion use case.

        Args:
            comment_service: Comment domain service
            identity_provider: Source of the current viewer
        """
        self.comment_service = comment_service
        self.identity_provider = identity_provider

    async def execute(self, request: GetDiscussionRequest) -> GetDiscussionResponse:
        """Execute get discussion flow.

        Steps:
        1. Read every comment of the recipe from the feed
        2. Partition into threads; orphaned replies are left out
        3. Compute stats and resolve the viewer's review intent

        Args:
            request: Recipe and its owner

        Returns:
            Threads, stats and the viewer's review routing
        """
        recipe = request.recipe_ref()
        comments = await self.comment_service.get_comments_for_recipe(recipe)
        view = partition(c for c in comments if c.recipe_id == recipe.recipe_id)

        viewer = self.identity_provider.current_viewer()
        resolution = resolve_review_intent(
            view.top_level, recipe, viewer.user_id if viewer else None
        )

        threads = [
            ThreadItem(
                comment=CommentItem.from_comment(thread.comment),
                replies=[CommentItem.from_comment(r) for r in thread.replies],
                reply_count=thread.reply_count,
            )
            for thread in view.threads()
        ]
        if view.orphans:
            logfire.info(
                "Orphaned replies hidden",
                recipe_id=recipe.recipe_id,
                count=len(view.orphans),
            )

        return GetDiscussionResponse(
            recipe_id=str(recipe.recipe_id),
            threads=threads,
            stats=comment_stats(view.comments, recipe.owner_id),
            viewer_comment_id=(
                str(resolution.existing.id) if resolution.existing else None
            ),
            review_intent=resolution.intent,
        )
