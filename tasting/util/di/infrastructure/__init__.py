"""Infrastructure providers."""

# Import bases
from .identity import ViewerProvider
from .persistence import PersistenceProvider

# Import implementations (needed for __subclasses__())
from .identity import ProdViewerProvider  # noqa: F401
from .persistence import ProdPersistenceProvider  # noqa: F401

__all__ = [
    "PersistenceProvider",
    "ProdPersistenceProvider",
    "ProdViewerProvider",
    "ViewerProvider",
]
