"""SQL repository implementations."""

from feedline.persistence.repository.activity import SqlActivityRepository
from feedline.persistence.repository.profile import SqlProfileRepository
from feedline.persistence.repository.user import SqlUserRepository

__all__ = [
    "SqlActivityRepository",
    "SqlProfileRepository",
    "SqlUserRepository",
]
