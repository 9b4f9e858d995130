"""Base service class for domain services."""

from typing import Any, ClassVar

import logfire


class Service:
    """Base class for all domain services.

    Domain services hold business logic that spans several comments, such
    as write validation and rating refreshes, rather than a single entity.
    """

    span_prefix: ClassVar[str] = "service"

    def span(self, operation: str, **attributes: Any) -> logfire.LogfireSpan:
        """Open a logfire span named ``<span_prefix>.<operation>``."""
        return logfire.span(f"{self.span_prefix}.{operation}", **attributes)
