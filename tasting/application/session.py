"""Live discussion session for one recipe.

A session owns one feed subscription and the local index built from it.
The index is a fold over delivered snapshots: each delivery replaces the
whole view, and a single consumer task is the only writer. Reads are
synchronous and never block; writes go to the feed and show up locally only
once the feed delivers them.
"""

import asyncio
from enum import Enum
from typing import Optional

import logfire

from tasting.adapter.error import TransportError
from tasting.application.error import SessionClosedError, SubscriptionDegradedError
from tasting.domain.model import (
    Comment,
    CommentSnapshot,
    CommentStats,
    CommentThread,
    RatingSummary,
)
from tasting.domain.repository import CommentFeed, FeedSubscription
from tasting.domain.service import (
    CommentService,
    IdentityProvider,
    ReviewResolution,
    ThreadView,
    comment_stats,
    find_viewer_comment,
    partition,
    resolve_review_intent,
    summarize_ratings,
)
from tasting.domain.value import CommentId, RecipeRef


class SessionStatus(str, Enum):
    """Lifecycle state of a discussion session."""

    IDLE = "idle"  # Not opened yet
    LOADING = "loading"  # Subscribed, no snapshot applied yet
    LIVE = "live"
    DEGRADED = "degraded"  # Subscription failed; reads raise
    CLOSED = "closed"


class DiscussionSession:
    """Realtime, read-mostly view of one recipe's discussion.

    Use as an async context manager so the subscription is always released:

        async with DiscussionSession(recipe, feed, service, identity) as session:
            await session.wait_for_update()
            session.top_level()
    """

    def __init__(
        self,
        recipe: RecipeRef,
        comment_feed: CommentFeed,
        comment_service: CommentService,
        identity_provider: IdentityProvider,
    ) -> None:
        """Initialize session.

        Args:
            recipe: The recipe under discussion
            comment_feed: Feed to subscribe to
            comment_service: Gateway for validated writes
            identity_provider: Source of the current viewer
        """
        self.recipe = recipe
        self.comment_feed = comment_feed
        self.comment_service = comment_service
        self.identity_provider = identity_provider

        self._view = ThreadView()
        self._status = SessionStatus.IDLE
        self._version = 0
        self._error: Optional[BaseException] = None
        self._subscription: Optional[FeedSubscription] = None
        self._consumer: Optional[asyncio.Task] = None
        self._changed = asyncio.Event()

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def version(self) -> int:
        """Number of snapshots applied so far."""
        return self._version

    @property
    def error(self) -> Optional[BaseException]:
        """The subscription error that degraded the session, if any."""
        return self._error

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> "DiscussionSession":
        """Subscribe to the feed and start applying snapshots.

        Does not wait for the first snapshot. Opening an open session does
        nothing.

        Raises:
            SessionClosedError: If the session was closed
        """
        if self._status == SessionStatus.CLOSED:
            raise SessionClosedError(self.recipe.recipe_id)
        if self._subscription is None:
            self._subscribe()
        return self

    async def resubscribe(self) -> None:
        """Drop the current subscription and start a fresh one.

        The way out of the degraded state. The last good view is discarded.

        Raises:
            SessionClosedError: If the session was closed
        """
        if self._status == SessionStatus.CLOSED:
            raise SessionClosedError(self.recipe.recipe_id)
        logfire.info(
            "Resubscribing discussion",
            recipe_id=self.recipe.recipe_id,
            previous_status=self._status.value,
        )
        await self._teardown()
        self._view = ThreadView()
        self._subscribe()

    async def close(self) -> None:
        """Unsubscribe and discard the index. Idempotent."""
        if self._status == SessionStatus.CLOSED:
            return
        self._status = SessionStatus.CLOSED
        await self._teardown()
        self._view = ThreadView()
        self._notify()
        logfire.info("Discussion closed", recipe_id=self.recipe.recipe_id)

    async def __aenter__(self) -> "DiscussionSession":
        return await self.open()

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def wait_for_update(
        self, after: Optional[int] = None, timeout: Optional[float] = None
    ) -> int:
        """Wait until a snapshot newer than ``after`` has been applied.

        The next delivery need not contain a write just made; callers
        looking for one should check and wait again.

        Args:
            after: Version to wait past; defaults to the current version
            timeout: Seconds to wait, or None to wait indefinitely

        Returns:
            The version now applied

        Raises:
            asyncio.TimeoutError: If nothing was applied in time
            SubscriptionDegradedError: If the subscription fails meanwhile
            SessionClosedError: If the session is closed meanwhile
        """
        target = self._version if after is None else after

        async def _wait() -> int:
            while True:
                self._check_readable()
                if self._version > target:
                    return self._version
                await self._changed.wait()

        return await asyncio.wait_for(_wait(), timeout=timeout)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def top_level(self) -> list[Comment]:
        """Top-level comments, newest first."""
        return list(self._current().top_level)

    def replies_of(self, comment_id: CommentId) -> list[Comment]:
        """Replies of a top-level comment, newest first.

        Empty for unknown, deleted or reply ids.
        """
        return list(self._current().replies_of(comment_id))

    def reply_count(self, comment_id: CommentId) -> int:
        return self._current().reply_count(comment_id)

    def threads(self) -> list[CommentThread]:
        return self._current().threads()

    def orphans(self) -> list[Comment]:
        """Replies whose parent is not in the current snapshot."""
        return list(self._current().orphans)

    def rating_summary(self) -> RatingSummary:
        return summarize_ratings(self._current().comments, self.recipe.owner_id)

    def average_rating(self) -> float:
        return self.rating_summary().average_rating

    def total_ratings(self) -> int:
        return self.rating_summary().total_ratings

    def comment_stats(self) -> CommentStats:
        return comment_stats(self._current().comments, self.recipe.owner_id)

    def viewer_existing_rating(self) -> Optional[Comment]:
        """The signed-in viewer's top-level comment, if they wrote one."""
        viewer = self.identity_provider.current_viewer()
        return find_viewer_comment(
            self._current().top_level, viewer.user_id if viewer else None
        )

    def review_intent(self) -> ReviewResolution:
        """Whether a review by the viewer should create or update."""
        viewer = self.identity_provider.current_viewer()
        return resolve_review_intent(
            self._current().top_level,
            self.recipe,
            viewer.user_id if viewer else None,
        )

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add_comment(self, text: str, rating: int | None = None) -> CommentId:
        self._check_open()
        return await self.comment_service.add_comment(
            self.recipe, self.identity_provider.current_viewer(), text, rating
        )

    async def add_reply(self, parent_id: CommentId, text: str) -> CommentId:
        """Reply to a top-level comment.

        The parent is checked against the local view when it is there and
        the write goes ahead when it is not.
        """
        self._check_open()
        parent = self._view.find(parent_id)
        return await self.comment_service.add_reply(
            self.recipe,
            self.identity_provider.current_viewer(),
            parent_id,
            text,
            parent=parent,
        )

    async def update_comment(
        self, comment_id: CommentId, text: str, rating: int | None = None
    ) -> None:
        self._check_open()
        await self.comment_service.update_comment(
            self.recipe,
            self.identity_provider.current_viewer(),
            comment_id,
            text,
            rating,
        )

    async def delete_comment(self, comment_id: CommentId) -> None:
        self._check_open()
        await self.comment_service.delete_comment(
            self.recipe, self.identity_provider.current_viewer(), comment_id
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _subscribe(self) -> None:
        self._status = SessionStatus.LOADING
        self._error = None
        subscription = self.comment_feed.subscribe(self.recipe.recipe_id)
        self._subscription = subscription
        self._consumer = asyncio.get_running_loop().create_task(
            self._consume(subscription),
            name=f"discussion:{self.recipe.recipe_id}",
        )
        logfire.info("Discussion subscribed", recipe_id=self.recipe.recipe_id)

    async def _teardown(self) -> None:
        subscription, self._subscription = self._subscription, None
        consumer, self._consumer = self._consumer, None
        if subscription is not None:
            subscription.unsubscribe()
        if consumer is not None and not consumer.done():
            consumer.cancel()
            try:
                await consumer
            except asyncio.CancelledError:
                pass

    async def _consume(self, subscription: FeedSubscription) -> None:
        try:
            async for snapshot in subscription:
                self._apply(snapshot)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._degrade(subscription, e)
            return
        if subscription is self._subscription and self._status != SessionStatus.CLOSED:
            self._degrade(
                subscription, TransportError("Comment feed subscription ended")
            )

    def _apply(self, snapshot: CommentSnapshot) -> None:
        comments = [c for c in snapshot.comments if c.recipe_id == self.recipe.recipe_id]
        if len(comments) != len(snapshot.comments):
            logfire.warn(
                "Dropped comments for another recipe",
                recipe_id=self.recipe.recipe_id,
                dropped=len(snapshot.comments) - len(comments),
            )
        self._view = partition(comments)
        self._version += 1
        self._status = SessionStatus.LIVE
        logfire.debug(
            "Snapshot applied",
            recipe_id=self.recipe.recipe_id,
            sequence=snapshot.sequence,
            version=self._version,
            size=self._view.size,
        )
        self._notify()

    def _degrade(self, subscription: FeedSubscription, error: BaseException) -> None:
        if subscription is not self._subscription:
            return
        logfire.error(
            "Discussion subscription failed",
            recipe_id=self.recipe.recipe_id,
            error=str(error),
        )
        self._error = error
        self._status = SessionStatus.DEGRADED
        subscription.unsubscribe()
        self._notify()

    def _notify(self) -> None:
        changed, self._changed = self._changed, asyncio.Event()
        changed.set()

    def _check_open(self) -> None:
        if self._status == SessionStatus.CLOSED:
            raise SessionClosedError(self.recipe.recipe_id)

    def _check_readable(self) -> None:
        self._check_open()
        if self._status == SessionStatus.DEGRADED:
            raise SubscriptionDegradedError(
                self.recipe.recipe_id, self._error
            ) from self._error

    def _current(self) -> ThreadView:
        self._check_readable()
        return self._view
