"""User repository interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from feedline.domain.model.user import User
from feedline.domain.value import UserId


class UserRepository(ABC):
    """Lookup of activity authors.

    Implementations live in the infrastructure layer.
    """

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: The user's unique identifier

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_ids(self, user_ids: Iterable[UserId]) -> dict[UserId, User]:
        """Batch lookup of users.

        Args:
            user_ids: User identifiers (duplicates allowed)

        Returns:
            Mapping of id to user; unknown ids are absent
        """
        pass

    @abstractmethod
    async def save(self, user: User) -> User:
        """Save a user (create or update).

        Args:
            user: The user to save

        Returns:
            The saved user
        """
        pass
