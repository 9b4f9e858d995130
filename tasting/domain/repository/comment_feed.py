"""Comment feed interface.

The comment feed is the remote, shared, multi-writer store of comment
records. It is the single source of truth: local views are only ever
rebuilt from what a subscription delivers.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from tasting.domain.model import Comment, CommentDraft, CommentPatch, CommentSnapshot
from tasting.domain.value import CommentId, RecipeId, UserId


class FeedSubscription(ABC):
    """Live stream of full snapshots for one recipe.

    Iterate with ``async for``. The stream ends after ``unsubscribe()`` and
    raises (once) if the feed fails; a failed subscription never resumes.
    """

    recipe_id: RecipeId

    def __aiter__(self) -> "FeedSubscription":
        return self

    @abstractmethod
    async def __anext__(self) -> CommentSnapshot:
        """Wait for the next snapshot."""
        pass

    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop delivering snapshots and release feed resources.

        Idempotent.
        """
        pass

    @property
    @abstractmethod
    def closed(self) -> bool:
        """True once unsubscribed or failed."""
        pass


class CommentFeed(ABC):
    """Contract for the remote comment store.

    Implementations live in the persistence layer. Write operations enforce
    authorship themselves; callers' checks are a convenience only.
    """

    @abstractmethod
    def subscribe(self, recipe_id: RecipeId) -> FeedSubscription:
        """Subscribe to every comment of a recipe, newest first.

        Must not block. The current snapshot is delivered first, then a new
        full snapshot after every change.

        Args:
            recipe_id: The recipe to follow

        Returns:
            A subscription the caller must unsubscribe
        """
        pass

    @abstractmethod
    async def list_by_recipe(self, recipe_id: RecipeId) -> List[Comment]:
        """Return all comments (top-level and replies) of a recipe, newest first.

        Args:
            recipe_id: The recipe ID

        Returns:
            List of comments
        """
        pass

    @abstractmethod
    async def get(self, comment_id: CommentId) -> Optional[Comment]:
        """Find a comment by ID.

        Args:
            comment_id: The comment's unique identifier

        Returns:
            The comment if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_replies(self, parent_id: CommentId) -> List[Comment]:
        """Find direct replies of a comment, oldest first.

        Args:
            parent_id: The parent comment ID

        Returns:
            List of replies
        """
        pass

    @abstractmethod
    async def create(self, draft: CommentDraft) -> CommentId:
        """Store a new comment.

        Args:
            draft: The validated comment to write

        Returns:
            The id assigned by the feed
        """
        pass

    @abstractmethod
    async def update(
        self, comment_id: CommentId, patch: CommentPatch, actor_id: UserId
    ) -> None:
        """Overwrite the text and rating of a comment.

        Args:
            comment_id: The comment to change
            patch: New text and rating
            actor_id: The user performing the change; must be the author

        Raises:
            AuthorizationError: If actor is not the author
            RecordNotFoundError: If the comment does not exist
        """
        pass

    @abstractmethod
    async def delete(
        self, comment_id: CommentId, actor_id: UserId, cascade: bool = False
    ) -> None:
        """Remove a comment.

        Only the author of ``comment_id`` is checked. With ``cascade`` the
        direct replies are removed too, whoever wrote them; otherwise they
        are left in place as orphans.

        Args:
            comment_id: The comment to remove
            actor_id: The user performing the removal; must be the author
            cascade: Also remove direct replies

        Raises:
            AuthorizationError: If actor is not the author
            RecordNotFoundError: If the comment does not exist
        """
        pass
