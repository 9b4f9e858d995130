"""Domain layer DI providers."""

from dishka import Scope, provide

from tasting.config import DiscussionSettings
from tasting.domain.repository import CommentFeed, RatingSummaryRepository
from tasting.domain.service import CommentService
from tasting.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Domain services are REQUEST-scoped; the feed they write to is shared.
    """

    scope = Scope.REQUEST

    @provide
    def get_comment_service(
        self,
        comment_feed: CommentFeed,
        rating_summary_repository: RatingSummaryRepository,
        settings: DiscussionSettings,
    ) -> CommentService:
        """Provide comment domain service."""
        return CommentService(
            comment_feed=comment_feed,
            rating_summary_repository=rating_summary_repository,
            settings=settings,
        )
