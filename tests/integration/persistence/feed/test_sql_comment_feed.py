"""Integration tests for SqlCommentFeed and SqlRatingSummaryRepository.

These run against a throwaway SQLite database through aiosqlite, using the
same table definitions as the migrations.
"""

import asyncio
from datetime import datetime

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from tasting.adapter.error import RecordNotFoundError, TransportError
from tasting.domain.error import AuthorizationError
from tasting.domain.model import CommentDraft, CommentPatch, RatingSummary
from tasting.domain.value import CommentId, Handle, RecipeId, UserId
from tasting.persistence.database import create_session_factory
from tasting.persistence.feed import SqlCommentFeed
from tasting.persistence.repository import SqlRatingSummaryRepository
from tasting.persistence.tables import comments_table, metadata
from tests.conftest import RECIPE_ID


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'tasting.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def feed(engine):
    feed = SqlCommentFeed(create_session_factory(engine), poll_interval=30)
    yield feed
    await feed.close()


def make_draft(
    author_id: str = "u1",
    text: str = "Hello",
    rating: int | None = None,
    parent_id: str | None = None,
    created_at: datetime | None = None,
) -> CommentDraft:
    return CommentDraft(
        recipe_id=RECIPE_ID,
        author_id=UserId(author_id),
        author_display=Handle(f"{author_id}@example.com"),
        text=text,
        rating=rating,
        parent_id=CommentId(parent_id) if parent_id else None,
        created_at=created_at or datetime.now(),
    )


async def next_snapshot(subscription, timeout: float = 2):
    return await asyncio.wait_for(subscription.__anext__(), timeout=timeout)


async def insert_blank_comment(engine) -> None:
    """Store a row with empty text, as a writer skipping validation would."""
    async with engine.begin() as conn:
        await conn.execute(
            comments_table.insert().values(
                id="blank",
                recipe_id=RECIPE_ID,
                author_id="u9",
                author_display="u9@example.com",
                text="",
                created_at=datetime(2024, 6, 1, 9, 30),
                is_owner_reply=False,
            )
        )


class TestSqlCommentFeedIntegration:
    """Reads and writes against the comments table."""

    @pytest.mark.asyncio
    async def test_create_and_read_back(self, feed):
        # Arrange
        draft = make_draft(text="Great bread", rating=5)

        # Act
        comment_id = await feed.create(draft)
        stored = await feed.get(comment_id)

        # Assert
        assert stored is not None
        assert stored.id == comment_id
        assert stored.recipe_id == RECIPE_ID
        assert stored.author_display.root == "u1@example.com"
        assert stored.text == "Great bread"
        assert stored.rating == 5
        assert stored.parent_id is None
        assert stored.created_at == draft.created_at

    @pytest.mark.asyncio
    async def test_list_newest_first_and_replies_oldest_first(self, feed):
        parent_id = await feed.create(make_draft(text="First"))
        newer_id = await feed.create(make_draft(author_id="u2", text="Second"))
        reply_a = await feed.create(make_draft(author_id="u3", parent_id=parent_id))
        reply_b = await feed.create(make_draft(author_id="u4", parent_id=parent_id))

        listed = await feed.list_by_recipe(RECIPE_ID)
        replies = await feed.find_replies(parent_id)

        assert [c.id for c in listed] == [reply_b, reply_a, newer_id, parent_id]
        assert [c.id for c in replies] == [reply_a, reply_b]
        assert await feed.list_by_recipe(RecipeId("other")) == []

    @pytest.mark.asyncio
    async def test_timestamp_ties_break_by_write_order(self, feed):
        same_time = datetime(2024, 6, 1, 9, 30)
        ids = [
            await feed.create(make_draft(author_id=f"u{n}", created_at=same_time))
            for n in range(4)
        ]
        parent_id = ids[0]
        reply_ids = [
            await feed.create(
                make_draft(author_id="u9", parent_id=parent_id, created_at=same_time)
            )
            for _ in range(3)
        ]

        listed = await feed.list_by_recipe(RECIPE_ID)
        replies = await feed.find_replies(parent_id)

        assert [c.id for c in listed] == list(reversed(ids + reply_ids))
        assert [c.id for c in replies] == reply_ids

    @pytest.mark.asyncio
    async def test_invalid_row_is_a_transport_error(self, engine, feed):
        await insert_blank_comment(engine)

        with pytest.raises(TransportError):
            await feed.list_by_recipe(RECIPE_ID)
        with pytest.raises(TransportError):
            await feed.get(CommentId("blank"))

    @pytest.mark.asyncio
    async def test_update_overwrites_text_and_rating(self, feed):
        comment_id = await feed.create(make_draft(rating=2))

        await feed.update(comment_id, CommentPatch(text="Edited"), UserId("u1"))

        stored = await feed.get(comment_id)
        assert stored.text == "Edited"
        assert stored.rating is None

    @pytest.mark.asyncio
    async def test_writes_enforce_authorship(self, feed):
        comment_id = await feed.create(make_draft())

        with pytest.raises(AuthorizationError):
            await feed.update(comment_id, CommentPatch(text="x"), UserId("u2"))
        with pytest.raises(AuthorizationError):
            await feed.delete(comment_id, UserId("u2"))
        with pytest.raises(RecordNotFoundError):
            await feed.delete(CommentId("missing"), UserId("u1"))

        assert await feed.get(comment_id) is not None

    @pytest.mark.asyncio
    async def test_delete_orphans_or_cascades(self, feed):
        kept_parent = await feed.create(make_draft(text="Keep replies"))
        orphan = await feed.create(make_draft(author_id="u2", parent_id=kept_parent))
        cascaded_parent = await feed.create(make_draft(text="Take replies"))
        await feed.create(make_draft(author_id="u2", parent_id=cascaded_parent))

        await feed.delete(kept_parent, UserId("u1"))
        await feed.delete(cascaded_parent, UserId("u1"), cascade=True)

        assert [c.id for c in await feed.list_by_recipe(RECIPE_ID)] == [orphan]


class TestSqlSubscriptionIntegration:
    """Polling subscriptions."""

    @pytest.mark.asyncio
    async def test_local_write_wakes_subscription(self, feed):
        # Arrange
        subscription = feed.subscribe(RECIPE_ID)
        first = await next_snapshot(subscription)

        # Act
        comment_id = await feed.create(make_draft())
        second = await next_snapshot(subscription)

        # Assert
        assert first.comments == ()
        assert [c.id for c in second.comments] == [comment_id]
        assert second.sequence > first.sequence
        subscription.unsubscribe()

    @pytest.mark.asyncio
    async def test_other_writers_picked_up_by_polling(self, engine):
        reader = SqlCommentFeed(create_session_factory(engine), poll_interval=0.05)
        writer = SqlCommentFeed(create_session_factory(engine))
        subscription = reader.subscribe(RECIPE_ID)
        await next_snapshot(subscription)

        comment_id = await writer.create(make_draft())
        snapshot = await next_snapshot(subscription)

        assert [c.id for c in snapshot.comments] == [comment_id]
        await reader.close()
        assert subscription.closed

    @pytest.mark.asyncio
    async def test_database_failure_ends_subscription(self, engine):
        feed = SqlCommentFeed(create_session_factory(engine), poll_interval=0.05)
        subscription = feed.subscribe(RECIPE_ID)
        await next_snapshot(subscription)

        async with engine.begin() as conn:
            await conn.execute(text("DROP TABLE comments"))
        with pytest.raises(TransportError):
            await feed.create(make_draft())
        with pytest.raises(TransportError):
            await next_snapshot(subscription)

        assert subscription.closed


    @pytest.mark.asyncio
    async def test_invalid_row_ends_subscription(self, engine):
        feed = SqlCommentFeed(create_session_factory(engine), poll_interval=0.05)
        subscription = feed.subscribe(RECIPE_ID)
        await next_snapshot(subscription)

        await insert_blank_comment(engine)
        with pytest.raises(TransportError):
            await next_snapshot(subscription)

        assert subscription.closed
        assert feed.watched_recipes() == set()

    @pytest.mark.asyncio
    async def test_recipes_forgotten_when_last_subscription_ends(self, feed):
        first = feed.subscribe(RECIPE_ID)
        second = feed.subscribe(RECIPE_ID)

        first.unsubscribe()
        assert feed.watched_recipes() == {RECIPE_ID}

        second.unsubscribe()
        assert feed.watched_recipes() == set()


class TestSqlRatingSummaryRepositoryIntegration:
    """Rating summaries in the recipe_ratings table."""

    @pytest.mark.asyncio
    async def test_save_then_replace(self, engine):
        repository = SqlRatingSummaryRepository(create_session_factory(engine))
        assert await repository.find_by_recipe(RECIPE_ID) is None

        await repository.save(RECIPE_ID, RatingSummary(average_rating=4.5, total_ratings=2))
        await repository.save(RECIPE_ID, RatingSummary(average_rating=3.0, total_ratings=3))

        stored = await repository.find_by_recipe(RECIPE_ID)
        assert stored == RatingSummary(average_rating=3.0, total_ratings=3)
