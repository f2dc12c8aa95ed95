"""Materializer: turns ordered ids into enriched activity items."""

from typing import Iterable, Optional

import logfire

from feedline.domain.model import Activity, ActivityItem, User
from feedline.domain.repository import (
    ActivityCache,
    ActivityRepository,
    ProfileRepository,
    UserRepository,
)
from feedline.domain.value import ActivityId, CacheGroup, UserId

from .base import Service
from .registry import ActionStringRegistry, PrefetchHook, VisibilityPolicy


class Materializer(Service):
    """Loads activities by id and enriches them for display."""

    def __init__(
        self,
        activity_repository: ActivityRepository,
        user_repository: UserRepository,
        cache: ActivityCache,
        action_registry: ActionStringRegistry,
        profile_repository: Optional[ProfileRepository] = None,
        prefetch_hooks: Optional[list[PrefetchHook]] = None,
        visibility_policy: Optional[VisibilityPolicy] = None,
    ) -> None:
        """Initialize materializer.

        Args:
            activity_repository: Activity repository
            user_repository: Author lookup
            cache: Activity cache (per-id entries)
            action_registry: Action string generators
            profile_repository: Full name lookup, None when profiles are off
            prefetch_hooks: Hooks run over every enriched batch, in order
            visibility_policy: Post-filter applied to loaded items
        """
        self.activity_repository = activity_repository
        self.user_repository = user_repository
        self.cache = cache
        self.action_registry = action_registry
        self.profile_repository = profile_repository
        self.prefetch_hooks = list(prefetch_hooks or [])
        self.visibility_policy = visibility_policy or VisibilityPolicy()

    async def materialize(
        self, ids: Iterable[ActivityId], cache_results: bool = True
    ) -> list[ActivityItem]:
        """Load and enrich activities, preserving the order of ``ids``.

        Ids that no longer exist are skipped.

        Args:
            ids: Ordered activity ids
            cache_results: Use and fill the per-id cache

        Returns:
            Enriched items in input order
        """
        ids = list(ids)
        with logfire.span("materializer.materialize", count=len(ids)):
            activities = await self.load(ids, cache_results=cache_results)
            items = await self.attach_users(activities)
            items = await self.enrich(items)

            visible = [item for item in items if self.visibility_policy.allows(item)]
            if len(visible) != len(items):
                logfire.info(
                    "Activities hidden by visibility policy",
                    hidden=len(items) - len(visible),
                )
            return visible

    async def load(
        self, ids: list[ActivityId], cache_results: bool = True
    ) -> list[Activity]:
        """Load raw activities in the order of ``ids``."""
        found: dict[ActivityId, Activity] = {}

        if cache_results:
            misses: list[ActivityId] = []
            for activity_id in ids:
                hit = await self.cache.get(
                    CacheGroup.ACTIVITY_ITEM.value, str(activity_id)
                )
                if hit is None:
                    misses.append(activity_id)
                else:
                    found[activity_id] = Activity.model_validate(hit)

            if misses:
                for activity in await self.activity_repository.find_by_ids(misses):
                    found[activity.id] = activity
                    await self.cache.set(
                        CacheGroup.ACTIVITY_ITEM.value,
                        str(activity.id),
                        activity.model_dump(mode="json"),
                    )
            logfire.debug(
                "Activities loaded", requested=len(ids), cache_misses=len(misses)
            )
        else:
            for activity in await self.activity_repository.find_by_ids(ids):
                found[activity.id] = activity

        missing = [activity_id for activity_id in ids if activity_id not in found]
        if missing:
            logfire.warn("Skipping activities that no longer exist", ids=missing)

        return [found[activity_id] for activity_id in ids if activity_id in found]

    async def attach_users(self, activities: list[Activity]) -> list[ActivityItem]:
        """Attach author details with a single batched user lookup."""
        user_ids = list(dict.fromkeys(activity.user_id for activity in activities))
        users: dict[UserId, User] = {}
        if user_ids:
            users = await self.user_repository.find_by_ids(user_ids)

        items = []
        for activity in activities:
            user = users.get(activity.user_id)
            items.append(
                ActivityItem(
                    **activity.model_dump(),
                    user_email=user.email if user else None,
                    user_nicename=user.nicename if user else None,
                    user_login=user.login if user else None,
                    display_name=user.display_name if user else None,
                )
            )
        return items

    async def enrich(self, items: list[ActivityItem]) -> list[ActivityItem]:
        """Full names, prefetch hooks, then generated action strings."""
        if not items:
            return items

        if self.profile_repository is not None:
            user_ids = list(dict.fromkeys(item.user_id for item in items))
            fullnames = await self.profile_repository.find_fullnames(user_ids)
            items = [
                item.model_copy(update={"user_fullname": fullnames[item.user_id]})
                if item.user_id in fullnames
                else item
                for item in items
            ]

        for hook in self.prefetch_hooks:
            items = await hook(items)

        return [self.with_action(item) for item in items]

    def with_action(self, item: ActivityItem) -> ActivityItem:
        """Replace the stored action with a generated one, if available."""
        generated = self.action_registry.generate(item)
        if not generated:
            return item
        return item.model_copy(update={"action": generated})
