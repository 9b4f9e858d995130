"""Mock providers for testing."""

from .identity import MockViewerProvider
from .persistence import MockPersistenceProvider
from .container import build_test_container

__all__ = [
    "MockPersistenceProvider",
    "MockViewerProvider",
    "build_test_container",
]
