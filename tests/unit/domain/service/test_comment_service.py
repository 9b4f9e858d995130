"""Unit tests for CommentService."""

import pytest

from tasting.adapter.error import TransportError
from tasting.config import DiscussionSettings
from tasting.domain.error import (
    AuthorizationError,
    BusinessRuleViolationError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from tasting.domain.model import CommentPatch
from tasting.domain.service import CommentService
from tasting.domain.value import CommentId, DeletePolicy, RecipeId, UserId
from tasting.persistence.feed import InMemoryCommentFeed
from tasting.persistence.repository.inmemory import InMemoryRatingSummaryRepository
from tests.conftest import OWNER_ID, make_comment, make_recipe, make_viewer
from tests.harness import create_env_fixture

# Unit test fixture - everything mocked
unit_env = create_env_fixture()


def build_service(**settings) -> tuple[CommentService, InMemoryCommentFeed]:
    feed = InMemoryCommentFeed()
    service = CommentService(
        comment_feed=feed,
        rating_summary_repository=InMemoryRatingSummaryRepository(),
        settings=DiscussionSettings(**settings),
    )
    return service, feed


class TestValidateComment:
    """Tests for validate_comment."""

    def test_returns_trimmed_text(self):
        service, _ = build_service()

        assert service.validate_comment("  Lovely  ", 4) == "Lovely"

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_text_rejected(self, text):
        service, _ = build_service()

        with pytest.raises(ValidationError) as exc_info:
            service.validate_comment(text)

        assert exc_info.value.errors == ["Comment text is required"]

    def test_too_long_rejected(self):
        service, _ = build_service(max_comment_length=10)

        with pytest.raises(ValidationError) as exc_info:
            service.validate_comment("x" * 11)

        assert exc_info.value.errors == ["Comment must be less than 10 characters"]

    @pytest.mark.parametrize("rating", [0, 6, -1, True])
    def test_rating_out_of_range_rejected(self, rating):
        service, _ = build_service()

        with pytest.raises(ValidationError) as exc_info:
            service.validate_comment("Nice", rating)

        assert exc_info.value.errors == ["Rating must be between 1 and 5"]

    def test_all_failures_are_reported(self):
        service, _ = build_service()

        with pytest.raises(ValidationError) as exc_info:
            service.validate_comment("", 9)

        assert len(exc_info.value.errors) == 2


class TestAddComment:
    """Tests for add_comment."""

    @pytest.mark.asyncio
    async def test_add_rated_comment(self, unit_env):
        """A rated top-level comment is written and the summary refreshed."""
        # Arrange
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        summaries = await unit_env.get(InMemoryRatingSummaryRepository)
        recipe = make_recipe()

        # Act
        comment_id = await service.add_comment(recipe, make_viewer("u1"), " Great ", 5)

        # Assert
        stored = await feed.get(comment_id)
        assert stored is not None
        assert stored.text == "Great"
        assert stored.rating == 5
        assert stored.parent_id is None
        assert stored.is_owner_reply is False
        assert stored.author_display.root == "u1@example.com"

        summary = summaries.summaries[recipe.recipe_id]
        assert summary.total_ratings == 1
        assert summary.average_rating == 5.0

    @pytest.mark.asyncio
    async def test_owner_comment_is_flagged_and_kept_out_of_summary(self, unit_env):
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        summaries = await unit_env.get(InMemoryRatingSummaryRepository)
        recipe = make_recipe()

        comment_id = await service.add_comment(recipe, make_viewer(OWNER_ID), "Mine", 5)

        stored = await feed.get(comment_id)
        assert stored is not None
        assert stored.is_owner_reply is True
        assert stored.rating == 5
        assert recipe.recipe_id not in summaries.summaries

    @pytest.mark.asyncio
    async def test_empty_text_writes_nothing(self, unit_env):
        """Validation fails before any write is attempted."""
        # Arrange
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        recipe = make_recipe()

        # Act & Assert
        with pytest.raises(ValidationError):
            await service.add_comment(recipe, make_viewer(), "", 4)

        assert await feed.list_by_recipe(recipe.recipe_id) == []

    @pytest.mark.asyncio
    async def test_requires_viewer(self, unit_env):
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)

        with pytest.raises(UnauthenticatedError):
            await service.add_comment(make_recipe(), None, "Hello")

        assert await feed.list_by_recipe(RecipeId("recipe-1")) == []

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, unit_env):
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        feed.fail_next_write()

        with pytest.raises(TransportError):
            await service.add_comment(make_recipe(), make_viewer(), "Hello")

    @pytest.mark.asyncio
    async def test_second_rating_allowed_by_default(self, unit_env):
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        recipe = make_recipe()

        await service.add_comment(recipe, make_viewer(), "First", 4)
        await service.add_comment(recipe, make_viewer(), "Second", 2)

        assert len(await feed.list_by_recipe(recipe.recipe_id)) == 2

    @pytest.mark.asyncio
    async def test_second_rating_rejected_when_enforced(self):
        service, feed = build_service(enforce_single_rating=True)
        recipe = make_recipe()
        await service.add_comment(recipe, make_viewer(), "First", 4)

        with pytest.raises(BusinessRuleViolationError):
            await service.add_comment(recipe, make_viewer(), "Second", 2)

        # Unrated comments are still fine
        await service.add_comment(recipe, make_viewer(), "Just chatting")
        assert len(await feed.list_by_recipe(recipe.recipe_id)) == 2


class TestAddReply:
    """Tests for add_reply."""

    @pytest.mark.asyncio
    async def test_reply_to_known_parent(self, unit_env):
        # Arrange
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        recipe = make_recipe()
        parent = await feed.save(make_comment("p1", author_id="u2", rating=4))

        # Act
        reply_id = await service.add_reply(
            recipe, make_viewer(OWNER_ID), parent.id, "Thanks!", parent=parent
        )

        # Assert
        reply = await feed.get(reply_id)
        assert reply is not None
        assert reply.parent_id == parent.id
        assert reply.rating is None
        assert reply.is_owner_reply is True

    @pytest.mark.asyncio
    async def test_unknown_parent_still_written(self, unit_env):
        """Parent checks are fail-soft when the parent is not known locally."""
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)

        reply_id = await service.add_reply(
            make_recipe(), make_viewer(), CommentId("not-delivered-yet"), "Hi"
        )

        assert (await feed.get(reply_id)).parent_id == "not-delivered-yet"

    @pytest.mark.asyncio
    async def test_reply_to_reply_rejected(self, unit_env):
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        reply = make_comment("r1", parent_id="p1")

        with pytest.raises(ValidationError):
            await service.add_reply(
                make_recipe(), make_viewer(), reply.id, "Nested", parent=reply
            )

        assert await feed.find_replies(reply.id) == []

    @pytest.mark.asyncio
    async def test_parent_from_other_recipe_rejected(self, unit_env):
        service = await unit_env.get(CommentService)
        parent = make_comment("p1", recipe_id="other-recipe")

        with pytest.raises(ValidationError):
            await service.add_reply(
                make_recipe(), make_viewer(), parent.id, "Hi", parent=parent
            )

    @pytest.mark.asyncio
    async def test_requires_viewer(self, unit_env):
        service = await unit_env.get(CommentService)

        with pytest.raises(UnauthenticatedError):
            await service.add_reply(make_recipe(), None, CommentId("p1"), "Hi")


class TestUpdateComment:
    """Tests for update_comment."""

    @pytest.mark.asyncio
    async def test_author_overwrites_text_and_rating(self, unit_env):
        # Arrange
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        summaries = await unit_env.get(InMemoryRatingSummaryRepository)
        recipe = make_recipe()
        original = await feed.save(make_comment("1", author_id="u1", rating=2))

        # Act
        await service.update_comment(recipe, make_viewer("u1"), original.id, "Better", 5)

        # Assert
        updated = await feed.get(original.id)
        assert updated.text == "Better"
        assert updated.rating == 5
        assert updated.created_at == original.created_at
        assert updated.author_id == original.author_id
        assert updated.parent_id is None
        assert summaries.summaries[recipe.recipe_id].average_rating == 5.0

    @pytest.mark.asyncio
    async def test_none_rating_clears_rating(self, unit_env):
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        summaries = await unit_env.get(InMemoryRatingSummaryRepository)
        recipe = make_recipe()
        original = await feed.save(make_comment("1", author_id="u1", rating=2))

        await service.update_comment(recipe, make_viewer("u1"), original.id, "Meh")

        assert (await feed.get(original.id)).rating is None
        assert summaries.summaries[recipe.recipe_id].total_ratings == 0

    @pytest.mark.asyncio
    async def test_non_author_rejected(self, unit_env):
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        original = await feed.save(make_comment("1", author_id="u1", rating=2))

        with pytest.raises(AuthorizationError):
            await service.update_comment(
                make_recipe(), make_viewer("u2"), original.id, "Hijack", 1
            )

        assert (await feed.get(original.id)).rating == 2

    @pytest.mark.asyncio
    async def test_feed_enforces_authorship_on_its_own(self, unit_env):
        """The feed rejects non-authors even if the caller skipped the check."""
        feed = await unit_env.get(InMemoryCommentFeed)
        original = await feed.save(make_comment("1", author_id="u1"))

        with pytest.raises(AuthorizationError):
            await feed.update(original.id, CommentPatch(text="x"), UserId("u2"))

    @pytest.mark.asyncio
    async def test_replies_are_immutable(self, unit_env):
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        reply = await feed.save(make_comment("2", author_id="u1", parent_id="1"))

        with pytest.raises(ValidationError):
            await service.update_comment(make_recipe(), make_viewer("u1"), reply.id, "Edit")

    @pytest.mark.asyncio
    async def test_missing_comment(self, unit_env):
        service = await unit_env.get(CommentService)

        with pytest.raises(NotFoundError):
            await service.update_comment(
                make_recipe(), make_viewer(), CommentId("nope"), "Edit"
            )

    @pytest.mark.asyncio
    async def test_invalid_input_checked_first(self, unit_env):
        service = await unit_env.get(CommentService)

        with pytest.raises(ValidationError):
            await service.update_comment(
                make_recipe(), make_viewer(), CommentId("nope"), "  ", 3
            )


class TestDeleteComment:
    """Tests for delete_comment."""

    @pytest.mark.asyncio
    async def test_orphan_policy_leaves_replies(self, unit_env):
        """Deleting a parent keeps its replies in the feed."""
        # Arrange
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        recipe = make_recipe()
        parent = await feed.save(make_comment("1", author_id="u1", rating=4))
        reply = await feed.save(make_comment("2", author_id="u2", parent_id="1"))

        # Act
        await service.delete_comment(recipe, make_viewer("u1"), parent.id)

        # Assert
        remaining = await feed.list_by_recipe(recipe.recipe_id)
        assert [c.id for c in remaining] == [reply.id]

    @pytest.mark.asyncio
    async def test_cascade_policy_removes_replies(self):
        service, feed = build_service(delete_policy=DeletePolicy.CASCADE)
        recipe = make_recipe()
        parent = await feed.save(make_comment("1", author_id="u1", rating=4))
        await feed.save(make_comment("2", author_id="u2", parent_id="1"))
        other = await feed.save(make_comment("3", author_id="u3"))

        await service.delete_comment(recipe, make_viewer("u1"), parent.id)

        remaining = await feed.list_by_recipe(recipe.recipe_id)
        assert [c.id for c in remaining] == [other.id]

    @pytest.mark.asyncio
    async def test_deleting_rated_comment_refreshes_summary(self, unit_env):
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        summaries = await unit_env.get(InMemoryRatingSummaryRepository)
        recipe = make_recipe()
        rated = await feed.save(make_comment("1", author_id="u1", rating=4))
        await feed.save(make_comment("2", author_id="u2", rating=2))

        await service.delete_comment(recipe, make_viewer("u1"), rated.id)

        summary = summaries.summaries[recipe.recipe_id]
        assert summary.total_ratings == 1
        assert summary.average_rating == 2.0

    @pytest.mark.asyncio
    async def test_author_can_delete_own_reply(self, unit_env):
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        await feed.save(make_comment("1", author_id="u1"))
        reply = await feed.save(make_comment("2", author_id="u2", parent_id="1"))

        await service.delete_comment(make_recipe(), make_viewer("u2"), reply.id)

        assert await feed.get(reply.id) is None

    @pytest.mark.asyncio
    async def test_non_author_rejected(self, unit_env):
        service = await unit_env.get(CommentService)
        feed = await unit_env.get(InMemoryCommentFeed)
        original = await feed.save(make_comment("1", author_id="u1"))

        with pytest.raises(AuthorizationError):
            await service.delete_comment(make_recipe(), make_viewer("u2"), original.id)

        assert await feed.get(original.id) is not None

    @pytest.mark.asyncio
    async def test_missing_comment(self, unit_env):
        service = await unit_env.get(CommentService)

        with pytest.raises(NotFoundError):
            await service.delete_comment(make_recipe(), make_viewer(), CommentId("nope"))

    @pytest.mark.asyncio
    async def test_requires_viewer(self, unit_env):
        service = await unit_env.get(CommentService)

        with pytest.raises(UnauthenticatedError):
            await service.delete_comment(make_recipe(), None, CommentId("1"))
