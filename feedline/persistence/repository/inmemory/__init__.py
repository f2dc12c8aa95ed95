"""In-memory repository implementations for testing."""

from .profile import InMemoryProfileRepository
from .user import InMemoryUserRepository

__all__ = [
    "InMemoryProfileRepository",
    "InMemoryUserRepository",
]
