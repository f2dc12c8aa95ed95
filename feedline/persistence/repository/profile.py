"""SQL implementation of Profile repository."""

from typing import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from feedline.domain.repository import ProfileRepository
from feedline.domain.value import UserId
from feedline.persistence.tables import user_profiles_table


class SqlProfileRepository(ProfileRepository):
    """Full names stored in the ``user_profiles`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_fullnames(self, user_ids: Iterable[UserId]) -> dict[UserId, str]:
        ids = list(set(user_ids))
        if not ids:
            return {}

        stmt = select(user_profiles_table).where(
            user_profiles_table.c.user_id.in_(ids)
        )
        result = await self.session.execute(stmt)
        return {
            UserId(int(row.user_id)): row.fullname for row in result.fetchall()
        }

    async def set_fullname(self, user_id: UserId, fullname: str) -> None:
        await self.session.execute(
            user_profiles_table.delete().where(user_profiles_table.c.user_id == user_id)
        )
        await self.session.execute(
            user_profiles_table.insert().values(user_id=user_id, fullname=fullname)
        )
        await self.session.flush()
