"""Base model for all domain entities."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class DomainModel(BaseModel):
    """Base class for all domain models.

    Instances are frozen: snapshots are shared between every reader of a
    discussion, so a change always produces a new object.
    """

    model_config = ConfigDict(
        frozen=True,
        arbitrary_types_allowed=True,
    )

    def replace(self, **changes: Any) -> Self:
        """Return a validated copy with ``changes`` applied.

        Unlike ``model_copy(update=...)``, the result is checked against
        the model's fields and validators.
        """
        return type(self).model_validate({**self.model_dump(), **changes})
