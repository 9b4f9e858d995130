"""Identity infrastructure providers."""

from dishka import Scope, provide

from tasting.adapter.identity import ContextIdentityProvider
from tasting.domain.service import IdentityProvider
from tasting.util.di.base import ProviderBase


class ViewerProvider(ProviderBase):
    """Identity component base."""

    __mock_component__ = "identity"


class ProdViewerProvider(ViewerProvider):
    """Production identity provider reading the viewer bound by the host."""

    __is_mock__ = False

    @provide(scope=Scope.APP)
    def get_identity_provider(self) -> IdentityProvider:
        """Provide context-bound identity provider.

        Bind the viewer per task with ``ContextIdentityProvider.signed_in``.
        """
        return ContextIdentityProvider()
