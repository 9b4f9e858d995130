"""Mock persistence providers for testing."""

from dishka import Scope, alias, provide

from tasting.domain.repository import CommentFeed, RatingSummaryRepository
from tasting.persistence.feed import InMemoryCommentFeed
from tasting.persistence.repository.inmemory import InMemoryRatingSummaryRepository
from tasting.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using the in-memory feed and repository.

    Uses REQUEST scope to ensure test isolation - each test gets a fresh feed.
    The concrete types are provided too so tests can seed data and inject
    failures.
    """

    __is_mock__ = True

    @provide(scope=Scope.REQUEST)
    def get_comment_feed(self) -> InMemoryCommentFeed:
        """Provide in-memory comment feed."""
        return InMemoryCommentFeed()

    @provide(scope=Scope.REQUEST)
    def get_rating_summary_repository(self) -> InMemoryRatingSummaryRepository:
        """Provide in-memory rating summary repository."""
        return InMemoryRatingSummaryRepository()

    comment_feed = alias(source=InMemoryCommentFeed, provides=CommentFeed)
    rating_summary_repository = alias(
        source=InMemoryRatingSummaryRepository, provides=RatingSummaryRepository
    )
