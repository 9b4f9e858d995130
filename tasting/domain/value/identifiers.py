"""Strongly typed identifiers for the discussion domain.

Identifiers are opaque strings owned by the systems that mint them: comment
ids come from the comment feed, recipe and user ids from the host
application.
"""

from typing import NewType

CommentId = NewType("CommentId", str)
RecipeId = NewType("RecipeId", str)
UserId = NewType("UserId", str)
