"""Open discussion use case."""

import logfire

from tasting.application.session import DiscussionSession
from tasting.application.usecase.base import BaseUseCase, RecipeRequest
from tasting.domain.repository import CommentFeed
from tasting.domain.service import CommentService, IdentityProvider


class OpenDiscussionRequest(RecipeRequest):
    """Open discussion request."""


class OpenDiscussionUseCase(BaseUseCase[OpenDiscussionRequest, DiscussionSession]):
    """Use case for starting a live discussion session on a recipe.

    The caller owns the returned session and must close it.
    """

    def __init__(
        self,
        comment_feed: CommentFeed,
        comment_service: CommentService,
        identity_provider: IdentityProvider,
    ) -> None:
        self.comment_feed = comment_feed
        self.comment_service = comment_service
        self.identity_provider = identity_provider

    async def execute(self, request: OpenDiscussionRequest) -> DiscussionSession:
        """Subscribe to the recipe's comments.

        Returns as soon as the subscription is set up; the first snapshot
        arrives shortly after.

        Args:
            request: Recipe to discuss and its owner

        Returns:
            An open session in the ``loading`` state
        """
        recipe = request.recipe_ref()
        with logfire.span("open_discussion", recipe_id=recipe.recipe_id):
            session = DiscussionSession(
                recipe,
                self.comment_feed,
                self.comment_service,
                self.identity_provider,
            )
            return await session.open()
