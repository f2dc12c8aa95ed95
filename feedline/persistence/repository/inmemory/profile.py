"""In-memory profile repository for testing."""

from typing import Iterable

from feedline.domain.repository.profile import ProfileRepository
from feedline.domain.value import UserId


class InMemoryProfileRepository(ProfileRepository):
    """In-memory implementation of ProfileRepository for testing."""

    def __init__(self) -> None:
        self._fullnames: dict[UserId, str] = {}

    async def find_fullnames(self, user_ids: Iterable[UserId]) -> dict[UserId, str]:
        return {
            user_id: self._fullnames[user_id]
            for user_id in set(user_ids)
            if user_id in self._fullnames
        }

    async def set_fullname(self, user_id: UserId, fullname: str) -> None:
        self._fullnames[user_id] = fullname
