"""SQL implementation of RatingSummary repository."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tasting.domain.model import RatingSummary
from tasting.domain.repository import RatingSummaryRepository
from tasting.domain.value import RecipeId
from tasting.persistence.mappers import rating_summary_to_dict, row_to_rating_summary
from tasting.persistence.tables import recipe_ratings_table


class SqlRatingSummaryRepository(RatingSummaryRepository):
    """Stores rating summaries in the ``recipe_ratings`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def find_by_recipe(self, recipe_id: RecipeId) -> Optional[RatingSummary]:
        """Find the stored summary for a recipe."""
        async with self.session_factory() as session:
            return await self._find(session, recipe_id)

    async def save(self, recipe_id: RecipeId, summary: RatingSummary) -> RatingSummary:
        """Save a summary (create or replace)."""
        values = rating_summary_to_dict(recipe_id, summary)
        async with self.session_factory() as session, session.begin():
            existing = await self._find(session, recipe_id)
            if existing is not None:
                stmt = (
                    recipe_ratings_table.update()
                    .where(recipe_ratings_table.c.recipe_id == recipe_id)
                    .values(**values)
                )
            else:
                stmt = recipe_ratings_table.insert().values(**values)
            await session.execute(stmt)
        return summary

    async def _find(
        self, session: AsyncSession, recipe_id: RecipeId
    ) -> Optional[RatingSummary]:
        stmt = select(recipe_ratings_table).where(
            recipe_ratings_table.c.recipe_id == recipe_id
        )
        row = (await session.execute(stmt)).fetchone()
        return row_to_rating_summary(row._asdict()) if row else None
