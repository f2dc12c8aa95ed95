"""SQL implementation of the Activity repository.

Runs on PostgreSQL (asyncpg) in production and on SQLite (aiosqlite) in
tests; only portable SQLAlchemy Core constructs are used.
"""

from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Iterable, List, Optional

import logfire
from sqlalchemy import delete, distinct, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from feedline.domain.error import StoreError
from feedline.domain.model import Activity
from feedline.domain.query import ComposedQuery
from feedline.domain.repository import ActivityRepository
from feedline.domain.value import (
    ACTIVITY_COLUMNS,
    COMMENT_TYPE,
    LAST_ACTIVITY_TYPE,
    ActivityId,
    SortDirection,
    SpamPolicy,
    UserId,
)
from feedline.persistence.mappers import activity_to_dict, row_to_activity
from feedline.persistence.tables import activity_meta_table, activity_table


def _describe(stmt: Any) -> str:
    """Statement text plus its bound parameters, in a stable order."""
    compiled = stmt.compile()
    params = sorted(compiled.params.items())
    return f"{compiled}\n{params!r}"


class SqlActivityRepository(ActivityRepository):
    """SQLAlchemy Core implementation of ActivityRepository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository with database session.

        Args:
            session: SQLAlchemy async session
        """
        self.session = session

    async def _execute(self, stmt: Any, flush: bool = False) -> Any:
        """Execute a statement, surfacing driver failures as StoreError."""
        try:
            result = await self.session.execute(stmt)
            if flush:
                await self.session.flush()
        except SQLAlchemyError as e:
            logfire.error("Activity store statement failed", error=str(e))
            raise StoreError(str(e)) from e
        return result

    # ------------------------------------------------------------------
    # Statement builders
    # ------------------------------------------------------------------

    @staticmethod
    def _from_clause(composed: ComposedQuery) -> Any:
        from_clause = activity_table
        for join in composed.joins:
            from_clause = from_clause.outerjoin(join.alias, join.onclause)
        return from_clause

    def _ids_statement(
        self, composed: ComposedQuery, limit: Optional[int], offset: int
    ) -> Select:
        query = composed.query
        order_column = activity_table.c[query.order_by]
        id_column = activity_table.c.id

        # DISTINCT needs the ORDER BY column in the select list
        columns = [id_column]
        if order_column is not id_column:
            columns.append(order_column)

        stmt = (
            select(*columns)
            .select_from(self._from_clause(composed))
            .where(*composed.clauses())
            .distinct()
        )

        if query.sort == SortDirection.ASC:
            ordering = [order_column.asc(), id_column.asc()]
        else:
            ordering = [order_column.desc(), id_column.desc()]
        if order_column is id_column:
            ordering = ordering[:1]
        stmt = stmt.order_by(*ordering)

        if limit is not None:
            stmt = stmt.limit(limit)
        if offset:
            stmt = stmt.offset(offset)
        return stmt

    def _count_statement(self, composed: ComposedQuery) -> Select:
        return (
            select(func.count(distinct(activity_table.c.id)))
            .select_from(self._from_clause(composed))
            .where(*composed.clauses())
        )

    @staticmethod
    def _criteria_clauses(criteria: dict[str, Any]) -> list[Any]:
        clauses = []
        for column_name, value in criteria.items():
            if column_name not in ACTIVITY_COLUMNS:
                raise ValueError(f"Unknown activity column: {column_name}")
            clauses.append(activity_table.c[column_name] == value)
        return clauses

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def find_by_id(self, activity_id: ActivityId) -> Optional[Activity]:
        """Find an activity by ID."""
        stmt = select(activity_table).where(activity_table.c.id == activity_id)
        result = await self._execute(stmt)
        row = result.fetchone()
        return row_to_activity(row._asdict()) if row else None

    async def find_by_ids(self, activity_ids: Iterable[ActivityId]) -> List[Activity]:
        """Batch lookup of activities."""
        ids = list(set(activity_ids))
        if not ids:
            return []

        with logfire.span("activity_repository.find_by_ids", count=len(ids)):
            stmt = select(activity_table).where(activity_table.c.id.in_(ids))
            result = await self._execute(stmt)
            return [row_to_activity(row._asdict()) for row in result.fetchall()]

    async def query_ids(
        self, composed: ComposedQuery, limit: Optional[int] = None, offset: int = 0
    ) -> List[ActivityId]:
        """Run the listing query and return ids in order."""
        with logfire.span(
            "activity_repository.query_ids",
            fragments=composed.fragment_names,
            limit=limit,
            offset=offset,
        ):
            stmt = self._ids_statement(composed, limit, offset)
            result = await self._execute(stmt)
            return [ActivityId(int(row[0])) for row in result.fetchall()]

    async def count(self, composed: ComposedQuery) -> int:
        """Count distinct matching ids."""
        with logfire.span(
            "activity_repository.count", fragments=composed.fragment_names
        ):
            result = await self._execute(self._count_statement(composed))
            return int(result.scalar() or 0)

    def describe_ids_query(
        self, composed: ComposedQuery, limit: Optional[int] = None, offset: int = 0
    ) -> str:
        return _describe(self._ids_statement(composed, limit, offset))

    def describe_count_query(self, composed: ComposedQuery) -> str:
        return _describe(self._count_statement(composed))

    async def find_ids_by_criteria(
        self, criteria: dict[str, Any], limit: Optional[int] = None
    ) -> List[ActivityId]:
        """Find ids matching exact-value criteria, ordered by id."""
        stmt = (
            select(activity_table.c.id)
            .where(*self._criteria_clauses(criteria))
            .order_by(activity_table.c.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._execute(stmt)
        return [ActivityId(int(row.id)) for row in result.fetchall()]

    async def find_comment_ids(
        self, item_ids: Iterable[ActivityId]
    ) -> List[ActivityId]:
        ids = list(item_ids)
        if not ids:
            return []
        stmt = (
            select(activity_table.c.id)
            .where(
                activity_table.c.type == COMMENT_TYPE,
                activity_table.c.item_id.in_(ids),
            )
            .order_by(activity_table.c.id)
        )
        result = await self._execute(stmt)
        return [ActivityId(int(row.id)) for row in result.fetchall()]

    async def find_child_ids(self, parent_id: ActivityId) -> List[ActivityId]:
        stmt = (
            select(activity_table.c.id)
            .where(
                activity_table.c.type == COMMENT_TYPE,
                activity_table.c.secondary_item_id == parent_id,
            )
            .order_by(activity_table.c.id)
        )
        result = await self._execute(stmt)
        return [ActivityId(int(row.id)) for row in result.fetchall()]

    async def find_descendant_ids(
        self,
        top_level_id: ActivityId,
        left: int,
        right: int,
        spam: SpamPolicy = SpamPolicy.HAM_ONLY,
    ) -> List[ActivityId]:
        """Comment ids strictly inside ``(left, right)`` of one thread."""
        with logfire.span(
            "activity_repository.find_descendant_ids",
            top_level_id=top_level_id,
            left=left,
            right=right,
        ):
            stmt = select(activity_table.c.id).where(
                activity_table.c.type == COMMENT_TYPE,
                activity_table.c.item_id == top_level_id,
                activity_table.c.mptt_left > left,
                activity_table.c.mptt_left < right,
            )
            if spam == SpamPolicy.HAM_ONLY:
                stmt = stmt.where(activity_table.c.is_spam.is_(False))
            elif spam == SpamPolicy.SPAM_ONLY:
                stmt = stmt.where(activity_table.c.is_spam.is_(True))

            stmt = stmt.order_by(
                activity_table.c.date_recorded.asc(), activity_table.c.id.asc()
            )
            result = await self._execute(stmt)
            return [ActivityId(int(row.id)) for row in result.fetchall()]

    async def get_recorded_components(
        self, skip_last_activity: bool = True
    ) -> List[str]:
        stmt = select(distinct(activity_table.c.component)).order_by(
            activity_table.c.component
        )
        if skip_last_activity:
            stmt = stmt.where(activity_table.c.type != LAST_ACTIVITY_TYPE)
        result = await self._execute(stmt)
        return [row[0] for row in result.fetchall()]

    async def get_last_updated(self) -> Optional[datetime]:
        stmt = select(func.max(activity_table.c.date_recorded))
        result = await self._execute(stmt)
        return result.scalar()

    async def find_id_by_content(self, content: str) -> Optional[ActivityId]:
        stmt = (
            select(activity_table.c.id)
            .where(activity_table.c.content == content)
            .order_by(activity_table.c.id)
            .limit(1)
        )
        result = await self._execute(stmt)
        activity_id = result.scalar()
        return ActivityId(int(activity_id)) if activity_id is not None else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[None]:
        """Run several writes so that they land together or not at all."""
        try:
            async with self.session.begin_nested():
                yield
        except SQLAlchemyError as e:
            logfire.error("Activity savepoint failed", error=str(e))
            raise StoreError(str(e)) from e

    async def insert(self, activity: Activity) -> Activity:
        """Insert a new activity and return it with its id."""
        with logfire.span(
            "activity_repository.insert",
            component=activity.component,
            type=activity.type,
        ):
            stmt = activity_table.insert().values(**activity_to_dict(activity))
            result = await self._execute(stmt, flush=True)

            activity_id = ActivityId(int(result.inserted_primary_key[0]))
            logfire.info("Activity inserted", activity_id=activity_id)
            return activity.model_copy(update={"id": activity_id})

    async def update(self, activity: Activity) -> Activity:
        """Update an existing activity, leaving its boundaries alone."""
        with logfire.span("activity_repository.update", activity_id=activity.id):
            stmt = (
                update(activity_table)
                .where(activity_table.c.id == activity.id)
                .values(**activity_to_dict(activity))
            )
            result = await self._execute(stmt, flush=True)
            if result.rowcount == 0:
                raise StoreError(f"Activity not found: {activity.id}")

            stored = await self.find_by_id(activity.id)
            return stored or activity

    async def delete_where(self, criteria: dict[str, Any]) -> List[ActivityId]:
        """Delete activities matching criteria, with their meta."""
        with logfire.span("activity_repository.delete_where", criteria=criteria):
            ids = await self.find_ids_by_criteria(criteria)
            if ids:
                await self.delete_by_ids(ids)
            return ids

    async def delete_by_ids(self, activity_ids: Iterable[ActivityId]) -> None:
        ids = list(activity_ids)
        if not ids:
            return
        # Meta rows first; SQLite does not enforce the cascade by default
        await self._execute(
            delete(activity_meta_table).where(
                activity_meta_table.c.activity_id.in_(ids)
            )
        )
        await self._execute(
            delete(activity_table).where(activity_table.c.id.in_(ids)), flush=True
        )

    async def update_boundaries(
        self,
        activity_id: ActivityId,
        left: int,
        right: int,
        comments_only: bool = True,
    ) -> None:
        stmt = (
            update(activity_table)
            .where(activity_table.c.id == activity_id)
            .values(mptt_left=left, mptt_right=right)
        )
        if comments_only:
            stmt = stmt.where(activity_table.c.type == COMMENT_TYPE)
        await self._execute(stmt)

    async def hide_all_for_user(self, user_id: UserId) -> int:
        stmt = (
            update(activity_table)
            .where(activity_table.c.user_id == user_id)
            .values(hide_sitewide=True)
        )
        result = await self._execute(stmt, flush=True)
        return result.rowcount or 0

    # ------------------------------------------------------------------
    # Meta
    # ------------------------------------------------------------------

    async def update_meta(
        self, activity_id: ActivityId, meta_key: str, meta_value: str
    ) -> None:
        with logfire.span(
            "activity_repository.update_meta",
            activity_id=activity_id,
            meta_key=meta_key,
        ):
            await self._execute(
                delete(activity_meta_table).where(
                    activity_meta_table.c.activity_id == activity_id,
                    activity_meta_table.c.meta_key == meta_key,
                )
            )
            await self._execute(
                activity_meta_table.insert().values(
                    activity_id=activity_id,
                    meta_key=meta_key,
                    meta_value=str(meta_value),
                ),
                flush=True,
            )

    async def get_meta(
        self, activity_id: ActivityId, meta_key: Optional[str] = None
    ) -> dict[str, List[str]]:
        stmt = (
            select(activity_meta_table.c.meta_key, activity_meta_table.c.meta_value)
            .where(activity_meta_table.c.activity_id == activity_id)
            .order_by(activity_meta_table.c.id)
        )
        if meta_key is not None:
            stmt = stmt.where(activity_meta_table.c.meta_key == meta_key)
        result = await self._execute(stmt)

        meta: dict[str, List[str]] = defaultdict(list)
        for row in result.fetchall():
            meta[row.meta_key].append(row.meta_value)
        return dict(meta)

    async def delete_meta(
        self, activity_id: ActivityId, meta_key: Optional[str] = None
    ) -> int:
        stmt = delete(activity_meta_table).where(
            activity_meta_table.c.activity_id == activity_id
        )
        if meta_key is not None:
            stmt = stmt.where(activity_meta_table.c.meta_key == meta_key)
        result = await self._execute(stmt, flush=True)
        return result.rowcount or 0
