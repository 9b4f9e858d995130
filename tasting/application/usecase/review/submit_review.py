"""Submit review use case."""

import logfire
from pydantic import BaseModel

from tasting.application.usecase.base import BaseUseCase, RecipeRequest
from tasting.domain.error import BusinessRuleViolationError, UnauthenticatedError
from tasting.domain.service import CommentService, IdentityProvider, resolve_review_intent
from tasting.domain.value import ReviewIntent


class SubmitReviewRequest(RecipeRequest):
    """Submit review request."""

    text: str
    rating: int | None = None


class SubmitReviewResponse(BaseModel):
    """Submit review response."""

    comment_id: str
    intent: ReviewIntent
    created: bool  # False when an existing comment was updated


class SubmitReviewUseCase(BaseUseCase[SubmitReviewRequest, SubmitReviewResponse]):
    """Use case for "submit review": update the viewer's comment or add one.

    The routing reads the feed right before writing but is still advisory:
    another tab can add a comment in between.
    """

    def __init__(
        self,
        comment_service: CommentService,
        identity_provider: IdentityProvider,
    ) -> None:
        """Initialize submit review use case.

        Args:
            comment_service: Comment domain service
            identity_provider: Source of the current viewer
        """
        self.comment_service = comment_service
        self.identity_provider = identity_provider

    async def execute(self, request: SubmitReviewRequest) -> SubmitReviewResponse:
        """Execute submit review flow.

        Steps:
        1. Read the recipe's comments and resolve the viewer's intent
        2. UPDATE: overwrite the existing comment's text and rating
        3. CREATE: add a new top-level comment
        4. COMMENT_ONLY (recipe owner): add an unrated comment

        Raises:
            UnauthenticatedError: If nobody is signed in
            BusinessRuleViolationError: If the owner tries to rate
            ValidationError: If text or rating is invalid
        """
        recipe = request.recipe_ref()
        viewer = self.identity_provider.current_viewer()
        if viewer is None:
            raise UnauthenticatedError("review")

        comments = await self.comment_service.get_comments_for_recipe(recipe)
        top_level = [
            c for c in comments if c.recipe_id == recipe.recipe_id and c.is_top_level
        ]
        resolution = resolve_review_intent(top_level, recipe, viewer.user_id)
        logfire.info(
            "Review routed",
            recipe_id=recipe.recipe_id,
            user_id=viewer.user_id,
            intent=resolution.intent.value,
        )

        existing = resolution.existing
        if resolution.intent == ReviewIntent.UPDATE and existing is not None:
            await self.comment_service.update_comment(
                recipe, viewer, existing.id, request.text, request.rating
            )
            return SubmitReviewResponse(
                comment_id=str(existing.id),
                intent=resolution.intent,
                created=False,
            )

        if resolution.intent == ReviewIntent.COMMENT_ONLY and request.rating is not None:
            raise BusinessRuleViolationError("Recipe owners cannot rate their own recipe")

        comment_id = await self.comment_service.add_comment(
            recipe, viewer, request.text, request.rating
        )
        return SubmitReviewResponse(
            comment_id=str(comment_id), intent=resolution.intent, created=True
        )
