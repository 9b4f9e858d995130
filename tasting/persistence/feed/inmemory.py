"""In-memory comment feed for testing."""

from collections import defaultdict
from datetime import datetime
from itertools import count
from typing import Optional
from uuid import uuid4

from tasting.adapter.error import RecordNotFoundError, TransportError
from tasting.domain.error import AuthorizationError
from tasting.domain.model import Comment, CommentDraft, CommentPatch
from tasting.domain.repository import CommentFeed
from tasting.domain.value import CommentId, RecipeId, UserId

from .subscription import QueueSubscription


class InMemoryCommentFeed(CommentFeed):
    """In-memory implementation of CommentFeed for testing.

    Every write pushes a fresh snapshot to all subscribers of the affected
    recipe before returning. Failures can be injected with
    ``fail_next_write`` and ``fail_subscriptions``.
    """

    def __init__(self) -> None:
        self._comments: dict[CommentId, Comment] = {}
        self._inserted: dict[CommentId, int] = {}
        self._counter = count()
        self._subscriptions: dict[RecipeId, set[QueueSubscription]] = defaultdict(set)
        self._next_write_error: Optional[TransportError] = None

    def subscribe(self, recipe_id: RecipeId) -> QueueSubscription:
        """Subscribe and immediately queue the current snapshot."""
        subscription = QueueSubscription(recipe_id, on_close=self._forget)
        self._subscriptions[recipe_id].add(subscription)
        subscription.push(self._ordered(recipe_id))
        return subscription

    def subscriber_count(self, recipe_id: RecipeId) -> int:
        """Number of live subscriptions for a recipe."""
        return len(self._subscriptions.get(recipe_id, ()))

    def watched_recipes(self) -> set[RecipeId]:
        """Recipes with at least one live subscription."""
        return set(self._subscriptions)

    def fail_subscriptions(self, recipe_id: RecipeId, error: BaseException) -> None:
        """End every subscription of a recipe with ``error``."""
        for subscription in list(self._subscriptions.get(recipe_id, ())):
            subscription.fail(error)

    def fail_next_write(self, error: TransportError | None = None) -> None:
        """Make the next create/update/delete raise ``error``."""
        self._next_write_error = error or TransportError("Injected write failure")

    async def list_by_recipe(self, recipe_id: RecipeId) -> list[Comment]:
        """Return all comments of a recipe, newest first."""
        return self._ordered(recipe_id)

    async def get(self, comment_id: CommentId) -> Optional[Comment]:
        """Find a comment by ID."""
        return self._comments.get(comment_id)

    async def find_replies(self, parent_id: CommentId) -> list[Comment]:
        """Find direct replies of a comment, oldest first."""
        replies = [c for c in self._comments.values() if c.parent_id == parent_id]
        replies.sort(key=self._sort_key)
        return replies

    async def save(self, comment: Comment) -> Comment:
        """Store a comment as-is, as another writer would, and notify."""
        self._store(comment)
        self._notify(comment.recipe_id)
        return comment

    async def create(self, draft: CommentDraft) -> CommentId:
        """Assign an ID, store the comment and notify."""
        self._raise_injected()
        comment = draft.to_comment(CommentId(uuid4().hex))
        self._store(comment)
        self._notify(comment.recipe_id)
        return comment.id

    async def update(
        self, comment_id: CommentId, patch: CommentPatch, actor_id: UserId
    ) -> None:
        """Overwrite text and rating after checking authorship."""
        self._raise_injected()
        comment = self._authorized(comment_id, actor_id)
        if comment.parent_id is not None and patch.rating is not None:
            raise TransportError("Replies cannot carry a rating")
        self._comments[comment_id] = comment.replace(
            text=patch.text, rating=patch.rating
        )
        self._notify(comment.recipe_id)

    async def delete(
        self, comment_id: CommentId, actor_id: UserId, cascade: bool = False
    ) -> None:
        """Remove a comment, and its direct replies when cascading."""
        self._raise_injected()
        comment = self._authorized(comment_id, actor_id)
        if cascade:
            for reply in await self.find_replies(comment_id):
                self._remove(reply.id)
        self._remove(comment_id)
        self._notify(comment.recipe_id)

    def _authorized(self, comment_id: CommentId, actor_id: UserId) -> Comment:
        comment = self._comments.get(comment_id)
        if comment is None:
            raise RecordNotFoundError("Comment", comment_id)
        if comment.author_id != actor_id:
            raise AuthorizationError("comment", comment_id, actor_id)
        return comment

    def _raise_injected(self) -> None:
        if self._next_write_error is not None:
            error, self._next_write_error = self._next_write_error, None
            raise error

    def _store(self, comment: Comment) -> None:
        if comment.id not in self._inserted:
            self._inserted[comment.id] = next(self._counter)
        self._comments[comment.id] = comment

    def _remove(self, comment_id: CommentId) -> None:
        self._comments.pop(comment_id, None)
        self._inserted.pop(comment_id, None)

    def _sort_key(self, comment: Comment) -> tuple[datetime, int]:
        return (comment.created_at, self._inserted.get(comment.id, 0))

    def _ordered(self, recipe_id: RecipeId) -> list[Comment]:
        comments = [c for c in self._comments.values() if c.recipe_id == recipe_id]
        # Newest first; insertion order breaks timestamp ties
        comments.sort(key=self._sort_key, reverse=True)
        return comments

    def _notify(self, recipe_id: RecipeId) -> None:
        snapshot = self._ordered(recipe_id)
        for subscription in list(self._subscriptions.get(recipe_id, ())):
            subscription.push(snapshot)

    def _forget(self, subscription: QueueSubscription) -> None:
        subscriptions = self._subscriptions[subscription.recipe_id]
        subscriptions.discard(subscription)
        if not subscriptions:
            del self._subscriptions[subscription.recipe_id]
