"""Profile repository interface."""

from abc import ABC, abstractmethod
from typing import Iterable

from feedline.domain.value import UserId


class ProfileRepository(ABC):
    """Optional source of users' full names."""

    @abstractmethod
    async def find_fullnames(self, user_ids: Iterable[UserId]) -> dict[UserId, str]:
        """Batch lookup of full names.

        Args:
            user_ids: User identifiers

        Returns:
            Mapping of id to full name; users without one are absent
        """
        pass

    @abstractmethod
    async def set_fullname(self, user_id: UserId, fullname: str) -> None:
        """Store a user's full name."""
        pass
