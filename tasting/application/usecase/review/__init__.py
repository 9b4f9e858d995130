"""Review use cases."""

from .submit_review import SubmitReviewRequest, SubmitReviewResponse, SubmitReviewUseCase

__all__ = [
    "SubmitReviewRequest",
    "SubmitReviewResponse",
    "SubmitReviewUseCase",
]
