"""Queue-backed feed subscription shared by the feed implementations."""

import asyncio
from datetime import datetime
from typing import Callable, Iterable, Optional

from tasting.adapter.error import TransportError
from tasting.domain.model import Comment, CommentSnapshot
from tasting.domain.repository import FeedSubscription
from tasting.domain.value import RecipeId

_END = object()


class QueueSubscription(FeedSubscription):
    """Subscription fed by its feed through ``push`` and ``fail``.

    Snapshots are full replacements, so an undelivered snapshot is dropped
    when a newer one arrives: a slow consumer always gets the latest state,
    possibly skipping sequence numbers.
    """

    def __init__(
        self,
        recipe_id: RecipeId,
        on_close: Optional[Callable[["QueueSubscription"], None]] = None,
    ) -> None:
        self.recipe_id = recipe_id
        self._queue: asyncio.Queue[object] = asyncio.Queue()
        self._closed = False
        self._sequence = 0
        self._on_close = on_close

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def sequence(self) -> int:
        """Sequence number of the last snapshot pushed."""
        return self._sequence

    def push(self, comments: Iterable[Comment]) -> None:
        """Queue a full snapshot, replacing any undelivered one."""
        if self._closed:
            return
        self._sequence += 1
        self._drain()
        self._queue.put_nowait(
            CommentSnapshot(
                recipe_id=self.recipe_id,
                comments=tuple(comments),
                sequence=self._sequence,
                delivered_at=datetime.now(),
            )
        )

    def fail(self, error: BaseException) -> None:
        """End the subscription with an error raised to the consumer."""
        if self._closed:
            return
        self._closed = True
        self._drain()
        self._queue.put_nowait(error)
        self._release()

    def unsubscribe(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._drain()
        self._queue.put_nowait(_END)
        self._release()

    async def __anext__(self) -> CommentSnapshot:
        if self._closed and self._queue.empty():
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _END:
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        if not isinstance(item, CommentSnapshot):
            raise TransportError(
                f"Unexpected item on comment subscription: {type(item).__name__}"
            )
        return item

    def _drain(self) -> None:
        while not self._queue.empty():
            self._queue.get_nowait()

    def _release(self) -> None:
        if self._on_close is not None:
            callback, self._on_close = self._on_close, None
            callback(self)
