"""Identity provider implementations.

The host application authenticates users and tells the discussion who the
viewer is; these adapters carry that answer.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

import logfire

from tasting.domain.service.identity import IdentityProvider
from tasting.domain.value import Viewer

_current_viewer: ContextVar[Viewer | None] = ContextVar(
    "tasting_current_viewer", default=None
)


class ContextIdentityProvider(IdentityProvider):
    """Reads the viewer from a context variable set by the host.

    Each asyncio task sees the viewer of the context it was created in, so
    concurrent requests for different users do not leak into each other.
    """

    def current_viewer(self) -> Viewer | None:
        return _current_viewer.get()

    @staticmethod
    @contextmanager
    def signed_in(viewer: Viewer | None) -> Iterator[None]:
        """Bind ``viewer`` for the duration of the block."""
        token = _current_viewer.set(viewer)
        logfire.debug(
            "Viewer bound",
            user_id=viewer.user_id if viewer else None,
        )
        try:
            yield
        finally:
            _current_viewer.reset(token)


class StaticIdentityProvider(IdentityProvider):
    """Always reports the same viewer. Used for tests and scripts."""

    def __init__(self, viewer: Viewer | None = None) -> None:
        self.viewer = viewer

    def current_viewer(self) -> Viewer | None:
        return self.viewer

    def sign_in(self, viewer: Viewer) -> None:
        self.viewer = viewer

    def sign_out(self) -> None:
        self.viewer = None
