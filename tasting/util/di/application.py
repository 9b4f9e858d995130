"""Application layer DI providers."""

from dishka import Scope, provide

from tasting.application.usecase.discussion import (
    GetDiscussionUseCase,
    OpenDiscussionUseCase,
)
from tasting.application.usecase.review import SubmitReviewUseCase
from tasting.domain.repository import CommentFeed
from tasting.domain.service import CommentService, IdentityProvider
from tasting.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Discussion use cases
    @provide(scope=Scope.REQUEST)
    def get_open_discussion_use_case(
        self,
        comment_feed: CommentFeed,
        comment_service: CommentService,
        identity_provider: IdentityProvider,
    ) -> OpenDiscussionUseCase:
        """Provide open discussion use case."""
        return OpenDiscussionUseCase(
            comment_feed=comment_feed,
            comment_service=comment_service,
            identity_provider=identity_provider,
        )

    @provide(scope=Scope.REQUEST)
    def get_get_discussion_use_case(
        self,
        comment_service: CommentService,
        identity_provider: IdentityProvider,
    ) -> GetDiscussionUseCase:
        """Provide get discussion use case."""
        return GetDiscussionUseCase(
            comment_service=comment_service, identity_provider=identity_provider
        )

    # Review use cases
    @provide(scope=Scope.REQUEST)
    def get_submit_review_use_case(
        self,
        comment_service: CommentService,
        identity_provider: IdentityProvider,
    ) -> SubmitReviewUseCase:
        """Provide submit review use case."""
        return SubmitReviewUseCase(
            comment_service=comment_service, identity_provider=identity_provider
        )
