"""In-memory repository implementations for testing."""

from .rating_summary import InMemoryRatingSummaryRepository

__all__ = [
    "InMemoryRatingSummaryRepository",
]
