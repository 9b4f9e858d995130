"""In-memory rating summary repository for testing."""

from typing import Optional

from tasting.domain.model import RatingSummary
from tasting.domain.repository import RatingSummaryRepository
from tasting.domain.value import RecipeId


class InMemoryRatingSummaryRepository(RatingSummaryRepository):
    """In-memory implementation of RatingSummaryRepository for testing."""

    def __init__(self) -> None:
        self.summaries: dict[RecipeId, RatingSummary] = {}

    async def find_by_recipe(self, recipe_id: RecipeId) -> Optional[RatingSummary]:
        return self.summaries.get(recipe_id)

    async def save(self, recipe_id: RecipeId, summary: RatingSummary) -> RatingSummary:
        self.summaries[recipe_id] = summary
        return summary
