"""SQL implementation of the comment feed.

Subscriptions poll the comments table and push a snapshot whenever the
result differs from the last one delivered. Writes made through the same
feed wake the affected subscriptions at once instead of waiting for the
next poll.
"""

import asyncio
import contextlib
from collections import defaultdict
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, List, Optional
from uuid import uuid4

import logfire
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tasting.adapter.error import RecordNotFoundError, TransportError
from tasting.domain.error import AuthorizationError
from tasting.domain.model import Comment, CommentDraft, CommentPatch
from tasting.domain.repository import CommentFeed
from tasting.domain.value import CommentId, RecipeId, UserId
from tasting.persistence.mappers import draft_to_dict, row_to_comment
from tasting.persistence.tables import comments_table

from .subscription import QueueSubscription


class SqlCommentFeed(CommentFeed):
    """Comment feed backed by the ``comments`` table."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        poll_interval: float = 1.0,
    ) -> None:
        """Initialize feed.

        Args:
            session_factory: Factory for short-lived sessions, one per call
            poll_interval: Seconds between checks for changes made elsewhere
        """
        self.session_factory = session_factory
        self.poll_interval = poll_interval
        self._wakeups: dict[RecipeId, set[asyncio.Event]] = defaultdict(set)
        self._pollers: dict[QueueSubscription, tuple[asyncio.Event, asyncio.Task]] = {}

    def subscribe(self, recipe_id: RecipeId) -> QueueSubscription:
        """Start a polling subscription. Requires a running event loop."""
        subscription = QueueSubscription(recipe_id, on_close=self._release)
        wakeup = asyncio.Event()
        task = asyncio.get_running_loop().create_task(
            self._poll(subscription, wakeup), name=f"comment-feed:{recipe_id}"
        )
        self._wakeups[recipe_id].add(wakeup)
        self._pollers[subscription] = (wakeup, task)
        return subscription

    def watched_recipes(self) -> set[RecipeId]:
        """Recipes with at least one live subscription."""
        return set(self._wakeups)

    async def close(self) -> None:
        """Stop every polling subscription."""
        for subscription in list(self._pollers):
            subscription.unsubscribe()

    async def list_by_recipe(self, recipe_id: RecipeId) -> List[Comment]:
        """Return all comments of a recipe, newest first."""
        stmt = (
            select(comments_table)
            .where(comments_table.c.recipe_id == recipe_id)
            .order_by(
                desc(comments_table.c.created_at),
                desc(comments_table.c.seq),
                desc(comments_table.c.id),
            )
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return _to_comments(result.fetchall())

    async def get(self, comment_id: CommentId) -> Optional[Comment]:
        """Find a comment by ID."""
        async with self._session() as session:
            return await self._find(session, comment_id)

    async def find_replies(self, parent_id: CommentId) -> List[Comment]:
        """Find direct replies of a comment, oldest first."""
        stmt = (
            select(comments_table)
            .where(comments_table.c.parent_id == parent_id)
            .order_by(
                comments_table.c.created_at,
                comments_table.c.seq,
                comments_table.c.id,
            )
        )
        async with self._session() as session:
            result = await session.execute(stmt)
            return _to_comments(result.fetchall())

    async def create(self, draft: CommentDraft) -> CommentId:
        """Insert a new comment under a fresh id.

        Each row gets the next insert sequence number, which orders comments
        sharing a timestamp by write order.
        """
        comment_id = CommentId(str(uuid4()))
        next_seq = select(
            func.coalesce(func.max(comments_table.c.seq), 0) + 1
        ).scalar_subquery()
        async with self._session() as session:
            await session.execute(
                comments_table.insert().values(
                    **draft_to_dict(draft, comment_id), seq=next_seq
                )
            )
        self._wake(draft.recipe_id)
        return comment_id

    async def update(
        self, comment_id: CommentId, patch: CommentPatch, actor_id: UserId
    ) -> None:
        """Overwrite text and rating after checking authorship."""
        async with self._session() as session:
            comment = await self._authorized(session, comment_id, actor_id)
            if comment.is_reply and patch.rating is not None:
                raise TransportError("Replies cannot carry a rating")
            await session.execute(
                comments_table.update()
                .where(comments_table.c.id == comment_id)
                .values(text=patch.text, rating=patch.rating)
            )
        self._wake(comment.recipe_id)

    async def delete(
        self, comment_id: CommentId, actor_id: UserId, cascade: bool = False
    ) -> None:
        """Delete a comment, and its direct replies when cascading."""
        async with self._session() as session:
            comment = await self._authorized(session, comment_id, actor_id)
            if cascade:
                await session.execute(
                    comments_table.delete().where(
                        comments_table.c.parent_id == comment_id
                    )
                )
            await session.execute(
                comments_table.delete().where(comments_table.c.id == comment_id)
            )
        self._wake(comment.recipe_id)

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        """Open a session in a transaction, translating driver errors."""
        try:
            async with self.session_factory() as session, session.begin():
                yield session
        except SQLAlchemyError as e:
            raise TransportError(f"Comment feed unavailable: {e}") from e

    async def _find(
        self, session: AsyncSession, comment_id: CommentId
    ) -> Optional[Comment]:
        stmt = select(comments_table).where(comments_table.c.id == comment_id)
        row = (await session.execute(stmt)).fetchone()
        return _to_comments([row])[0] if row else None

    async def _authorized(
        self, session: AsyncSession, comment_id: CommentId, actor_id: UserId
    ) -> Comment:
        comment = await self._find(session, comment_id)
        if comment is None:
            raise RecordNotFoundError("Comment", comment_id)
        if comment.author_id != actor_id:
            raise AuthorizationError("comment", comment_id, actor_id)
        return comment

    async def _poll(self, subscription: QueueSubscription, wakeup: asyncio.Event) -> None:
        last: Optional[tuple[Comment, ...]] = None
        try:
            while not subscription.closed:
                # Cleared before reading so a write during the read is not missed
                wakeup.clear()
                comments = tuple(await self.list_by_recipe(subscription.recipe_id))
                if comments != last:
                    subscription.push(comments)
                    last = comments
                with contextlib.suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(wakeup.wait(), timeout=self.poll_interval)
        except Exception as e:
            error = (
                e
                if isinstance(e, TransportError)
                else TransportError(f"Comment feed subscription failed: {e}")
            )
            logfire.error(
                "Comment feed subscription failed",
                recipe_id=subscription.recipe_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            subscription.fail(error)

    def _wake(self, recipe_id: RecipeId) -> None:
        for wakeup in self._wakeups.get(recipe_id, ()):
            wakeup.set()

    def _release(self, subscription: QueueSubscription) -> None:
        wakeup, task = self._pollers.pop(subscription)
        wakeups = self._wakeups[subscription.recipe_id]
        wakeups.discard(wakeup)
        if not wakeups:
            del self._wakeups[subscription.recipe_id]
        if task is not asyncio.current_task():
            task.cancel()


def _to_comments(rows: Iterable) -> List[Comment]:
    """Map rows to comments; a row the model rejects is a feed failure."""
    try:
        return [row_to_comment(row._asdict()) for row in rows]
    except PydanticValidationError as e:
        raise TransportError(f"Comment feed returned an invalid row: {e}") from e
