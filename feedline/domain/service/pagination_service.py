"""Pagination and count engine."""

from dataclasses import dataclass, field

import logfire

from feedline.domain.query import ActivityQuery, ComposedQuery
from feedline.domain.repository import (
    ActivityCache,
    ActivityRepository,
    QueryComposer,
)
from feedline.domain.value import ActivityId, CacheGroup

from .base import Service


@dataclass
class ActivityPage:
    """One page of ordered ids."""

    ids: list[ActivityId]
    has_more: bool
    composed: ComposedQuery
    cached: bool = field(default=False)


class PaginationService(Service):
    """Fetches ordered id pages and totals for composed queries.

    Results are cached per listing group. Queries that filter out
    ``last_activity`` rows live in the long-lived ``activity`` group; all
    others go to the short-lived ``activity_with_last_activity`` group.
    """

    def __init__(
        self,
        activity_repository: ActivityRepository,
        query_composer: QueryComposer,
        cache: ActivityCache,
    ) -> None:
        """Initialize pagination service.

        Args:
            activity_repository: Activity repository
            query_composer: Query composer
            cache: Activity cache
        """
        self.activity_repository = activity_repository
        self.query_composer = query_composer
        self.cache = cache

    @staticmethod
    def cache_group(composed: ComposedQuery) -> str:
        if composed.excludes_last_activity:
            return CacheGroup.ACTIVITY.value
        return CacheGroup.ACTIVITY_WITH_LAST_ACTIVITY.value

    def compose(self, query: ActivityQuery) -> ComposedQuery:
        return self.query_composer.compose(query)

    async def fetch_page(
        self, query: ActivityQuery, composed: ComposedQuery | None = None
    ) -> ActivityPage:
        """Fetch one page of ids.

        One extra row is requested beyond ``per_page``; if it comes back it
        sets ``has_more`` and is dropped.

        Args:
            query: Listing query
            composed: Already composed form of ``query``, if available

        Returns:
            Page of ids in listing order
        """
        composed = composed or self.compose(query)
        effective = composed.query

        limit = None
        offset = 0
        if effective.paginated:
            limit = effective.per_page + 1
            offset = (effective.page - 1) * effective.per_page

        with logfire.span(
            "pagination_service.fetch_page",
            page=effective.page,
            per_page=effective.per_page,
            fragments=composed.fragment_names,
        ):
            ids: list[ActivityId] | None = None
            cached = False
            group = self.cache_group(composed)

            if effective.cache_results:
                text = self.activity_repository.describe_ids_query(
                    composed, limit=limit, offset=offset
                )
                hit = await self.cache.get_incremented(group, text)
                if hit is not None:
                    ids = [ActivityId(int(i)) for i in hit]
                    cached = True

            if ids is None:
                ids = await self.activity_repository.query_ids(
                    composed, limit=limit, offset=offset
                )
                if effective.cache_results:
                    await self.cache.set_incremented(group, text, list(ids))

            has_more = effective.paginated and len(ids) > effective.per_page
            if has_more:
                ids = ids[: effective.per_page]

            logfire.info(
                "Activity page fetched",
                count=len(ids),
                has_more=has_more,
                cache_group=group,
                cached=cached,
            )
            return ActivityPage(
                ids=ids, has_more=has_more, composed=composed, cached=cached
            )

    async def fetch_count(
        self, query: ActivityQuery, composed: ComposedQuery | None = None
    ) -> int:
        """Count distinct matching activities, clamped to ``max``.

        Args:
            query: Listing query
            composed: Already composed form of ``query``, if available

        Returns:
            Total number of matching activities
        """
        composed = composed or self.compose(query)
        effective = composed.query

        with logfire.span(
            "pagination_service.fetch_count", fragments=composed.fragment_names
        ):
            total: int | None = None
            group = self.cache_group(composed)

            if effective.cache_results:
                text = self.activity_repository.describe_count_query(composed)
                hit = await self.cache.get_incremented(group, text)
                if hit is not None:
                    total = int(hit)

            if total is None:
                total = await self.activity_repository.count(composed)
                if effective.cache_results:
                    await self.cache.set_incremented(group, text, total)

            if effective.max and total > effective.max:
                total = effective.max

            logfire.info("Activity count fetched", total=total, cache_group=group)
            return total

    async def invalidate_listings(self) -> None:
        """Orphan every cached listing and count."""
        for group in (CacheGroup.ACTIVITY, CacheGroup.ACTIVITY_WITH_LAST_ACTIVITY):
            await self.cache.bump_epoch(group.value)
        logfire.info("Activity listing caches invalidated")
