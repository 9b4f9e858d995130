"""Comment domain service."""

from datetime import datetime

import logfire

from tasting.adapter.error import TransportError
from tasting.config import DiscussionSettings
from tasting.domain.error import (
    AuthorizationError,
    BusinessRuleViolationError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from tasting.domain.model import Comment, CommentDraft, CommentPatch, RatingSummary
from tasting.domain.repository import CommentFeed, RatingSummaryRepository
from tasting.domain.value import (
    MAX_RATING,
    MIN_RATING,
    CommentId,
    DeletePolicy,
    RecipeRef,
    Viewer,
)

from .base import Service
from .rating import summarize_ratings


class CommentService(Service):
    """Domain service for comment writes.

    Every operation validates locally, then writes to the comment feed. None
    of them touch a local view of the discussion: the change shows up when
    the feed next delivers a snapshot, which may not be the very next one.
    """

    span_prefix = "comment_service"

    def __init__(
        self,
        comment_feed: CommentFeed,
        rating_summary_repository: RatingSummaryRepository,
        settings: DiscussionSettings,
    ) -> None:
        """Initialize comment service.

        Args:
            comment_feed: Remote comment store
            rating_summary_repository: Denormalized per-recipe rating figures
            settings: Discussion rules
        """
        self.comment_feed = comment_feed
        self.rating_summary_repository = rating_summary_repository
        self.settings = settings

    def validate_comment(self, text: str, rating: int | None = None) -> str:
        """Check comment text and optional rating.

        Args:
            text: Comment body as typed
            rating: Optional star rating

        Returns:
            The trimmed text

        Raises:
            ValidationError: With one message per failed check
        """
        errors: list[str] = []
        trimmed = text.strip() if isinstance(text, str) else ""

        if not trimmed:
            errors.append("Comment text is required")
        elif len(trimmed) > self.settings.max_comment_length:
            errors.append(
                f"Comment must be less than {self.settings.max_comment_length} characters"
            )

        if rating is not None and (
            isinstance(rating, bool)
            or not isinstance(rating, int)
            or not MIN_RATING <= rating <= MAX_RATING
        ):
            errors.append(f"Rating must be between {MIN_RATING} and {MAX_RATING}")

        if errors:
            raise ValidationError(errors)
        return trimmed

    async def add_comment(
        self,
        recipe: RecipeRef,
        viewer: Viewer | None,
        text: str,
        rating: int | None = None,
    ) -> CommentId:
        """Write a top-level comment, optionally rated.

        Args:
            recipe: Recipe being discussed
            viewer: Signed-in author
            text: Comment text
            rating: Optional 1-5 star rating

        Returns:
            ID assigned by the feed

        Raises:
            UnauthenticatedError: If nobody is signed in
            ValidationError: If text or rating is invalid
            BusinessRuleViolationError: If single-rating enforcement is on
                and the viewer already rated this recipe
            TransportError: If the feed write fails
        """
        if viewer is None:
            raise UnauthenticatedError("comment")

        with self.span(
            "add_comment",
            recipe_id=recipe.recipe_id,
            author_id=viewer.user_id,
            rated=rating is not None,
        ):
            trimmed = self.validate_comment(text, rating)
            is_owner = recipe.is_owner(viewer.user_id)

            if self.settings.enforce_single_rating and rating is not None:
                await self._ensure_not_rated(recipe, viewer)

            draft = CommentDraft(
                recipe_id=recipe.recipe_id,
                author_id=viewer.user_id,
                author_display=viewer.display,
                author_avatar=viewer.avatar_url,
                text=trimmed,
                rating=rating,
                created_at=datetime.now(),
                parent_id=None,
                is_owner_reply=is_owner,
            )
            comment_id = await self._create(draft)
            logfire.info(
                "Comment created",
                comment_id=comment_id,
                recipe_id=recipe.recipe_id,
                is_owner_reply=is_owner,
            )

            if rating is not None and not is_owner:
                await self.refresh_recipe_rating(recipe)

            return comment_id

    async def add_reply(
        self,
        recipe: RecipeRef,
        viewer: Viewer | None,
        parent_id: CommentId,
        text: str,
        parent: Comment | None = None,
    ) -> CommentId:
        """Write a reply under a top-level comment.

        The parent check is fail-soft: ``parent`` is whatever the caller has
        materialized locally. When it is unknown the write is still
        attempted, since the parent may exist in the feed without having
        been delivered yet.

        Args:
            recipe: Recipe being discussed
            viewer: Signed-in author
            parent_id: Top-level comment being replied to
            text: Reply text
            parent: Locally known copy of the parent, if any

        Returns:
            ID assigned by the feed

        Raises:
            UnauthenticatedError: If nobody is signed in
            ValidationError: If text is invalid or the known parent is a
                reply or belongs to another recipe
            TransportError: If the feed write fails
        """
        if viewer is None:
            raise UnauthenticatedError("reply")

        with self.span(
            "add_reply",
            recipe_id=recipe.recipe_id,
            author_id=viewer.user_id,
            parent_id=parent_id,
        ):
            trimmed = self.validate_comment(text)

            if parent is None:
                logfire.info(
                    "Parent not materialized locally, writing reply anyway",
                    parent_id=parent_id,
                )
            elif parent.parent_id is not None:
                logfire.warn("Reply to a reply rejected", parent_id=parent_id)
                raise ValidationError("Replies can only be added to top-level comments")
            elif parent.recipe_id != recipe.recipe_id:
                logfire.error(
                    "Parent comment does not belong to recipe",
                    parent_id=parent_id,
                    parent_recipe_id=parent.recipe_id,
                    target_recipe_id=recipe.recipe_id,
                )
                raise ValidationError("Parent comment does not belong to this recipe")

            draft = CommentDraft(
                recipe_id=recipe.recipe_id,
                author_id=viewer.user_id,
                author_display=viewer.display,
                author_avatar=viewer.avatar_url,
                text=trimmed,
                rating=None,
                created_at=datetime.now(),
                parent_id=parent_id,
                is_owner_reply=recipe.is_owner(viewer.user_id),
            )
            comment_id = await self._create(draft)
            logfire.info(
                "Reply created",
                comment_id=comment_id,
                parent_id=parent_id,
                recipe_id=recipe.recipe_id,
            )
            return comment_id

    async def update_comment(
        self,
        recipe: RecipeRef,
        viewer: Viewer | None,
        comment_id: CommentId,
        text: str,
        rating: int | None = None,
    ) -> None:
        """Overwrite the text and rating of the viewer's top-level comment.

        ``created_at``, ``author_id`` and ``parent_id`` never change. The
        authorship check here only saves a round trip; the feed enforces it
        again and is the authority.

        Args:
            recipe: Recipe being discussed
            viewer: Signed-in author
            comment_id: Comment to change
            text: New text
            rating: New rating; None clears it

        Raises:
            UnauthenticatedError: If nobody is signed in
            ValidationError: If input is invalid, the target is a reply, or
                it belongs to another recipe
            NotFoundError: If the comment does not exist
            AuthorizationError: If the viewer is not the author
            TransportError: If the feed call fails
        """
        if viewer is None:
            raise UnauthenticatedError("edit comments")

        with self.span(
            "update_comment",
            comment_id=comment_id,
            recipe_id=recipe.recipe_id,
            user_id=viewer.user_id,
        ):
            trimmed = self.validate_comment(text, rating)

            target = await self._get_existing(comment_id)
            if target.recipe_id != recipe.recipe_id:
                raise ValidationError(
                    f"Comment {comment_id} does not belong to recipe {recipe.recipe_id}"
                )
            if target.parent_id is not None:
                raise ValidationError("Replies cannot be edited")
            if target.author_id != viewer.user_id:
                logfire.warn(
                    "Update by non-author rejected",
                    comment_id=comment_id,
                    user_id=viewer.user_id,
                )
                raise AuthorizationError("comment", comment_id, viewer.user_id)

            patch = CommentPatch(text=trimmed, rating=rating)
            try:
                await self.comment_feed.update(comment_id, patch, viewer.user_id)
            except TransportError as e:
                logfire.error(
                    "Failed to update comment", comment_id=comment_id, error=str(e)
                )
                raise
            logfire.info(
                "Comment updated",
                comment_id=comment_id,
                text_length=len(trimmed),
                rated=rating is not None,
            )

            rating_touched = target.rating is not None or rating is not None
            if rating_touched and not recipe.is_owner(viewer.user_id):
                await self.refresh_recipe_rating(recipe)

    async def delete_comment(
        self,
        recipe: RecipeRef,
        viewer: Viewer | None,
        comment_id: CommentId,
    ) -> None:
        """Delete one of the viewer's comments.

        With the ``orphan`` policy only the comment itself goes; its replies
        stay in the feed and are shown under no parent. With ``cascade`` the
        feed removes the direct replies as well.

        Raises:
            UnauthenticatedError: If nobody is signed in
            NotFoundError: If the comment does not exist
            AuthorizationError: If the viewer is not the author
            TransportError: If the feed call fails
        """
        if viewer is None:
            raise UnauthenticatedError("delete comments")

        policy = self.settings.delete_policy
        with self.span(
            "delete_comment",
            comment_id=comment_id,
            recipe_id=recipe.recipe_id,
            user_id=viewer.user_id,
            policy=policy.value,
        ):
            target = await self._get_existing(comment_id)
            if target.author_id != viewer.user_id:
                logfire.warn(
                    "Delete by non-author rejected",
                    comment_id=comment_id,
                    user_id=viewer.user_id,
                )
                raise AuthorizationError("comment", comment_id, viewer.user_id)

            cascade = policy == DeletePolicy.CASCADE and target.parent_id is None
            try:
                await self.comment_feed.delete(comment_id, viewer.user_id, cascade=cascade)
            except TransportError as e:
                logfire.error(
                    "Failed to delete comment", comment_id=comment_id, error=str(e)
                )
                raise
            logfire.info("Comment deleted", comment_id=comment_id, cascade=cascade)

            if target.parent_id is None and target.rating is not None:
                await self.refresh_recipe_rating(recipe)

    async def get_comments_for_recipe(self, recipe: RecipeRef) -> list[Comment]:
        """Read every comment of a recipe once, newest first.

        Args:
            recipe: Recipe being discussed

        Returns:
            List of comments
        """
        with self.span("get_comments_for_recipe", recipe_id=recipe.recipe_id):
            comments = await self.comment_feed.list_by_recipe(recipe.recipe_id)
            logfire.info(
                "Comments retrieved for recipe",
                recipe_id=recipe.recipe_id,
                count=len(comments),
            )
            return comments

    async def refresh_recipe_rating(self, recipe: RecipeRef) -> RatingSummary:
        """Recompute and store the recipe's denormalized rating figures.

        Reads the feed afresh instead of trusting any local view.

        Args:
            recipe: Recipe whose figures changed

        Returns:
            The stored summary
        """
        with self.span("refresh_recipe_rating", recipe_id=recipe.recipe_id):
            comments = await self.comment_feed.list_by_recipe(recipe.recipe_id)
            summary = summarize_ratings(comments, recipe.owner_id)
            saved = await self.rating_summary_repository.save(recipe.recipe_id, summary)
            logfire.info(
                "Recipe rating refreshed",
                recipe_id=recipe.recipe_id,
                average_rating=saved.average_rating,
                total_ratings=saved.total_ratings,
            )
            return saved

    async def _create(self, draft: CommentDraft) -> CommentId:
        try:
            return await self.comment_feed.create(draft)
        except TransportError as e:
            logfire.error(
                "Failed to create comment",
                recipe_id=draft.recipe_id,
                parent_id=draft.parent_id,
                error=str(e),
            )
            raise

    async def _get_existing(self, comment_id: CommentId) -> Comment:
        comment = await self.comment_feed.get(comment_id)
        if comment is None:
            logfire.warn("Comment not found", comment_id=comment_id)
            raise NotFoundError("Comment", comment_id)
        return comment

    async def _ensure_not_rated(self, recipe: RecipeRef, viewer: Viewer) -> None:
        comments = await self.comment_feed.list_by_recipe(recipe.recipe_id)
        already_rated = any(
            c.parent_id is None
            and c.rating is not None
            and c.author_id == viewer.user_id
            for c in comments
        )
        if already_rated:
            logfire.warn(
                "Second rating rejected",
                recipe_id=recipe.recipe_id,
                user_id=viewer.user_id,
            )
            raise BusinessRuleViolationError("You have already rated this recipe")
