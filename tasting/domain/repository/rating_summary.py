"""Rating summary repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from tasting.domain.model import RatingSummary
from tasting.domain.value import RecipeId


class RatingSummaryRepository(ABC):
    """Denormalized rating figures stored alongside each recipe.

    Listing pages read these instead of subscribing to every discussion.
    """

    @abstractmethod
    async def find_by_recipe(self, recipe_id: RecipeId) -> Optional[RatingSummary]:
        """Find the stored summary for a recipe.

        Args:
            recipe_id: The recipe ID

        Returns:
            The summary if one was saved, None otherwise
        """
        pass

    @abstractmethod
    async def save(self, recipe_id: RecipeId, summary: RatingSummary) -> RatingSummary:
        """Replace the stored summary for a recipe.

        Args:
            recipe_id: The recipe ID
            summary: Freshly computed summary

        Returns:
            The saved summary
        """
        pass
