"""SQL implementation of User repository."""

from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from feedline.domain.model import User
from feedline.domain.repository import UserRepository
from feedline.domain.value import UserId
from feedline.persistence.mappers import row_to_user, user_to_dict
from feedline.persistence.tables import users_table


class SqlUserRepository(UserRepository):
    """Author lookups against the ``users`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        found = await self.find_by_ids([user_id])
        return found.get(user_id)

    async def find_by_ids(self, user_ids: Iterable[UserId]) -> dict[UserId, User]:
        """Load every listed user with a single IN query.

        Unknown ids are simply absent from the result.
        """
        ids = sorted(set(user_ids))
        if not ids:
            return {}

        result = await self.session.execute(
            select(users_table).where(users_table.c.id.in_(ids))
        )
        users = (row_to_user(dict(row)) for row in result.mappings())
        return {user.id: user for user in users}

    async def save(self, user: User) -> User:
        values = user_to_dict(user)
        if await self.find_by_id(user.id):
            stmt = (
                users_table.update()
                .where(users_table.c.id == user.id)
                .values(**values)
            )
        else:
            stmt = users_table.insert().values(**values)
        await self.session.execute(stmt)
        await self.session.flush()
        return user
