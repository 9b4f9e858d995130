"""Viewer identity interface."""

from tasting.domain.value import Viewer


class IdentityProvider:
    """Generic source of the currently signed-in viewer.

    Authentication itself happens elsewhere; the discussion only needs to
    know who is acting right now.
    """

    def current_viewer(self) -> Viewer | None:
        """Return the signed-in viewer, or None when signed out."""
        raise NotImplementedError
