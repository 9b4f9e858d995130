"""SQL repository implementations."""

from tasting.persistence.repository.rating_summary import SqlRatingSummaryRepository

__all__ = [
    "SqlRatingSummaryRepository",
]
