"""Persistence infrastructure providers."""

from collections.abc import AsyncIterator

import logfire
from dishka import Scope, provide
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from tasting.config import FeedSettings, Settings
from tasting.domain.repository import CommentFeed, RatingSummaryRepository
from tasting.persistence.database import create_engine, create_session_factory
from tasting.persistence.feed import SqlCommentFeed
from tasting.persistence.repository import SqlRatingSummaryRepository
from tasting.util.di.base import ProviderBase
from tasting.util.observability import instrument_sqlalchemy


class PersistenceProvider(ProviderBase):
    """Persistence component base."""

    __mock_component__ = "persistence"


class ProdPersistenceProvider(PersistenceProvider):
    """Production persistence provider using SQL."""

    __is_mock__ = False

    scope = Scope.APP

    @provide(scope=Scope.APP)
    async def get_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide database engine, disposed when the container closes."""
        engine = create_engine(settings)
        # Instrument SQLAlchemy for observability
        instrument_sqlalchemy(engine)
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def get_session_factory(
        self, engine: AsyncEngine
    ) -> async_sessionmaker[AsyncSession]:
        """Provide session factory."""
        return create_session_factory(engine)

    @provide(scope=Scope.APP)
    async def get_comment_feed(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        feed_settings: FeedSettings,
    ) -> AsyncIterator[CommentFeed]:
        """Provide the SQL comment feed.

        Shared by every request so that local writes wake all live
        subscriptions. Remaining subscriptions are stopped on close.
        """
        feed = SqlCommentFeed(
            session_factory, poll_interval=feed_settings.poll_interval_seconds
        )
        yield feed
        await feed.close()
        logfire.info("Comment feed closed")

    @provide(scope=Scope.APP)
    def get_rating_summary_repository(
        self, session_factory: async_sessionmaker[AsyncSession]
    ) -> RatingSummaryRepository:
        """Provide RatingSummary repository."""
        return SqlRatingSummaryRepository(session_factory)
