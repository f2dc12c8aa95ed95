"""Activity domain service.

Orchestrates the listing pipeline (compose, page, materialize, attach
comments) and the activity lifecycle (save, delete, comment threads, meta)
together with cache invalidation.
"""

from datetime import datetime
from typing import Literal, Optional

import logfire

from feedline.config import ActivitySettings
from feedline.domain.error import (
    ActivityValidationError,
    BusinessRuleViolationError,
    NotFoundError,
    StoreError,
)
from feedline.domain.model import Activity, ActivityItem, ActivityListing, CommentNode
from feedline.domain.query import ActivityCriteria, ActivityQuery
from feedline.domain.repository import ActivityCache, ActivityRepository
from feedline.domain.value import (
    COMMENT_TYPE,
    ActivityId,
    CacheGroup,
    DisplayComments,
    ErrorType,
    SpamPolicy,
    UserId,
)

from .base import Service
from .comment_tree_service import CommentTreeService
from .materializer import Materializer
from .pagination_service import PaginationService
from .tree_rebuilder import TreeRebuilder


class ActivityService(Service):
    """Domain service for activity listings and lifecycle."""

    def __init__(
        self,
        activity_repository: ActivityRepository,
        pagination_service: PaginationService,
        materializer: Materializer,
        comment_tree_service: CommentTreeService,
        tree_rebuilder: TreeRebuilder,
        cache: ActivityCache,
        settings: ActivitySettings,
    ) -> None:
        """Initialize activity service.

        Args:
            activity_repository: Activity repository
            pagination_service: Id paging and counting
            materializer: Id to item enrichment
            comment_tree_service: Comment forests
            tree_rebuilder: Nested-set numbering
            cache: Activity cache
            settings: Activity settings
        """
        self.activity_repository = activity_repository
        self.pagination_service = pagination_service
        self.materializer = materializer
        self.comment_tree_service = comment_tree_service
        self.tree_rebuilder = tree_rebuilder
        self.cache = cache
        self.settings = settings

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    async def get(self, query: ActivityQuery) -> ActivityListing:
        """Run an activity query.

        Store failures are logged and produce an empty listing.

        Args:
            query: Listing query

        Returns:
            Listing with items (or ids), optional total and has-more flag
        """
        with logfire.span(
            "activity_service.get",
            page=query.page,
            per_page=query.per_page,
            scope=query.scope,
        ):
            try:
                listing = await self._list(query)
            except StoreError as e:
                logfire.error("Activity listing failed", error=str(e))
                return ActivityListing()

            logfire.info(
                "Activities listed",
                count=len(listing.activities),
                total=listing.total,
                has_more=listing.has_more_items,
            )
            return listing

    async def _list(self, query: ActivityQuery) -> ActivityListing:
        composed = self.pagination_service.compose(query)
        effective = composed.query

        if effective.count_total_only:
            total = await self.pagination_service.fetch_count(query, composed)
            return ActivityListing(activities=[], total=total)

        page = await self.pagination_service.fetch_page(query, composed)

        if effective.fields == "ids":
            activities: list = list(page.ids)
        else:
            activities = await self.materializer.materialize(
                page.ids, cache_results=effective.cache_results
            )
            if effective.display_comments != DisplayComments.NONE:
                activities = await self.comment_tree_service.append_comments(
                    activities, effective.spam
                )

        total = None
        if effective.count_total:
            total = await self.pagination_service.fetch_count(query, composed)

        return ActivityListing(
            activities=activities, total=total, has_more_items=page.has_more
        )

    async def get_by_id(self, activity_id: ActivityId) -> Optional[ActivityItem]:
        """Get a single enriched activity, hidden or not.

        Args:
            activity_id: Activity ID

        Returns:
            The activity if found, None otherwise (also on store failure)
        """
        with logfire.span("activity_service.get_by_id", activity_id=activity_id):
            try:
                items = await self.materializer.materialize([activity_id])
            except StoreError as e:
                logfire.error(
                    "Activity lookup failed", activity_id=activity_id, error=str(e)
                )
                return None
            if not items:
                logfire.warn("Activity not found", activity_id=activity_id)
                return None
            return items[0]

    async def get_comments(
        self, activity_id: ActivityId, spam: SpamPolicy = SpamPolicy.HAM_ONLY
    ) -> list[CommentNode]:
        """Get the comment forest of an activity.

        A store failure is logged and yields an empty forest.

        Raises:
            NotFoundError: If the activity doesn't exist
        """
        try:
            activity = await self.activity_repository.find_by_id(activity_id)
            if activity is None:
                raise NotFoundError("Activity", str(activity_id))

            forest = await self.comment_tree_service.get_comment_tree(
                activity_id,
                activity.mptt_left,
                activity.mptt_right,
                spam,
                ActivityId(activity.item_id) if activity.is_comment else None,
            )
        except StoreError as e:
            logfire.error(
                "Comment tree lookup failed", activity_id=activity_id, error=str(e)
            )
            return []
        return forest or []

    # ------------------------------------------------------------------
    # Save / delete
    # ------------------------------------------------------------------

    def validate(self, activity: Activity) -> Optional[ActivityValidationError]:
        """Check required fields without touching the store."""
        if not activity.component:
            return ActivityValidationError(
                "missing_component", "You need to specify a component."
            )
        if not activity.type:
            return ActivityValidationError(
                "missing_type", "You need to specify an activity type."
            )
        if (
            not activity.content.strip()
            and activity.type in self.settings.types_requiring_content
        ):
            return ActivityValidationError(
                "missing_content", "Please enter some content to post."
            )
        return None

    async def save(
        self, activity: Activity, error_type: ErrorType = ErrorType.BOOL
    ) -> Activity | Literal[False] | ActivityValidationError:
        """Insert or update an activity.

        Args:
            activity: Activity to save (no id for inserts)
            error_type: Report validation failures as False (BOOL) or as the
                error object (ERROR)

        Returns:
            The saved activity, False, or the validation error
        """
        with logfire.span(
            "activity_service.save",
            activity_id=activity.id,
            component=activity.component,
            type=activity.type,
        ):
            error = self.validate(activity)
            if error is not None:
                logfire.warn(
                    "Activity failed validation", code=error.code, type=activity.type
                )
                return error if error_type == ErrorType.ERROR else False

            try:
                if activity.id is None:
                    saved = await self.activity_repository.insert(activity)
                else:
                    saved = await self.activity_repository.update(activity)
            except StoreError as e:
                logfire.error("Activity save failed", error=str(e))
                return False

            await self._invalidate_activity(saved)
            logfire.info(
                "Activity saved",
                activity_id=saved.id,
                type=saved.type,
                created=activity.id is None,
            )
            return saved

    async def delete(
        self, criteria: ActivityCriteria
    ) -> list[ActivityId] | Literal[False]:
        """Delete activities matching criteria, with their comments and meta.

        Replies below a deleted comment go with it, and the threads that lost
        comments are renumbered. All writes share one savepoint, so a store
        failure leaves nothing half deleted.

        Args:
            criteria: Exact-match criteria; empty criteria delete nothing

        Returns:
            Ids of the matched activities, or False when nothing was deleted
            or the store failed
        """
        with logfire.span("activity_service.delete", criteria=criteria.as_dict()):
            if criteria.is_empty():
                logfire.warn("Refusing to delete activities without criteria")
                return False

            try:
                target_ids = await self.activity_repository.find_ids_by_criteria(
                    criteria.as_dict()
                )
                targets = await self.activity_repository.find_by_ids(target_ids)
                replies = await self._collect_replies(targets)

                async with self.activity_repository.savepoint():
                    deleted = await self.activity_repository.delete_where(
                        criteria.as_dict()
                    )
                    if not deleted:
                        logfire.info("No activities matched delete criteria")
                        return False
                    if replies:
                        await self.activity_repository.delete_by_ids(replies)
                    comment_ids = replies + await self._delete_comments(
                        deleted, skip=set(replies)
                    )

                    # Comments removed from threads that still exist
                    threads = {
                        ActivityId(activity.item_id)
                        for activity in targets
                        if activity.is_comment and activity.item_id not in deleted
                    }
                    stale: list[ActivityId] = []
                    for thread_id in sorted(threads):
                        stale.extend(await self._rebuild_thread(thread_id))
            except StoreError as e:
                logfire.error("Activity delete failed", error=str(e))
                return False

            await self.pagination_service.invalidate_listings()
            for activity_id in [*deleted, *comment_ids, *stale]:
                await self._forget(activity_id)

            logfire.info(
                "Activities deleted",
                count=len(deleted),
                comments=len(comment_ids),
            )
            return deleted

    async def _collect_replies(self, targets: list[Activity]) -> list[ActivityId]:
        """Replies nested below the targeted comments, targets excluded."""
        target_ids = {activity.id for activity in targets}
        replies: list[ActivityId] = []
        for target in sorted(targets, key=lambda activity: activity.id):
            if not target.is_comment:
                continue
            for reply_id in (await self._collect_subtree(target.id))[1:]:
                if reply_id not in target_ids and reply_id not in replies:
                    replies.append(reply_id)
        return replies

    async def _delete_comments(
        self, parent_ids: list[ActivityId], skip: set[ActivityId]
    ) -> list[ActivityId]:
        """Delete all comments attached to the given activities, recursively."""
        removed: list[ActivityId] = []
        pending = list(parent_ids)
        seen = set(parent_ids) | skip
        while pending:
            comment_ids = [
                comment_id
                for comment_id in await self.activity_repository.find_comment_ids(
                    pending
                )
                if comment_id not in seen
            ]
            if not comment_ids:
                break
            await self.activity_repository.delete_by_ids(comment_ids)
            seen.update(comment_ids)
            removed.extend(comment_ids)
            pending = comment_ids
        return removed

    # ------------------------------------------------------------------
    # Comment threads
    # ------------------------------------------------------------------

    async def add_comment(
        self,
        activity_id: ActivityId,
        user_id: UserId,
        content: str,
        parent_id: Optional[ActivityId] = None,
    ) -> Activity | Literal[False]:
        """Post a comment on an activity or reply to another comment.

        Args:
            activity_id: Top-level activity of the thread
            user_id: Author
            content: Comment text
            parent_id: Comment being replied to (None for a direct reply)

        Returns:
            The saved comment with boundaries assigned, or False when the
            store failed

        Raises:
            ActivityValidationError: If the content is empty
            NotFoundError: If the activity or parent doesn't exist
            BusinessRuleViolationError: If the parent is in another thread
        """
        with logfire.span(
            "activity_service.add_comment",
            activity_id=activity_id,
            user_id=user_id,
            parent_id=parent_id,
        ):
            if not content.strip():
                raise ActivityValidationError(
                    "missing_content", "Please enter some content to post."
                )

            try:
                activity = await self._find_thread_root(activity_id)
                parent_id = parent_id or activity_id
                if parent_id != activity_id:
                    await self._check_parent(activity_id, parent_id)

                comment = Activity(
                    user_id=user_id,
                    component="activity",
                    type=COMMENT_TYPE,
                    content=content,
                    primary_link=activity.primary_link,
                    item_id=activity_id,
                    secondary_item_id=parent_id,
                    hide_sitewide=activity.hide_sitewide,
                    date_recorded=datetime.now(),
                )
                async with self.activity_repository.savepoint():
                    saved = await self.activity_repository.insert(comment)
                    stale = await self._rebuild_thread(activity_id)
                    refreshed = await self.activity_repository.find_by_id(saved.id)
            except StoreError as e:
                logfire.error(
                    "Comment could not be saved", activity_id=activity_id, error=str(e)
                )
                return False

            saved = refreshed or saved
            await self._invalidate_activity(saved)
            for stale_id in stale:
                await self._forget(stale_id)

            logfire.info(
                "Comment added",
                comment_id=saved.id,
                activity_id=activity_id,
                parent_id=parent_id,
            )
            return saved

    async def _find_thread_root(self, activity_id: ActivityId) -> Activity:
        activity = await self.activity_repository.find_by_id(activity_id)
        if activity is None:
            logfire.warn("Activity not found for comment", activity_id=activity_id)
            raise NotFoundError("Activity", str(activity_id))
        if activity.is_comment:
            raise BusinessRuleViolationError(
                "Comments must be attached to a top-level activity"
            )
        return activity

    async def _check_parent(
        self, activity_id: ActivityId, parent_id: ActivityId
    ) -> None:
        parent = await self.activity_repository.find_by_id(parent_id)
        if parent is None:
            raise NotFoundError("Comment", str(parent_id))
        if not parent.is_comment or parent.item_id != activity_id:
            logfire.error(
                "Parent comment does not belong to thread",
                parent_id=parent_id,
                parent_item_id=parent.item_id,
                activity_id=activity_id,
            )
            raise BusinessRuleViolationError(
                "Parent comment does not belong to this activity"
            )

    async def delete_comment(
        self, activity_id: ActivityId, comment_id: ActivityId
    ) -> list[ActivityId] | Literal[False]:
        """Delete a comment and every reply below it.

        Args:
            activity_id: Top-level activity of the thread
            comment_id: Comment to delete

        Returns:
            Ids of all deleted comments, or False when the store failed

        Raises:
            NotFoundError: If the comment isn't part of the thread
        """
        with logfire.span(
            "activity_service.delete_comment",
            activity_id=activity_id,
            comment_id=comment_id,
        ):
            try:
                comment = await self.activity_repository.find_by_id(comment_id)
                if (
                    comment is None
                    or not comment.is_comment
                    or comment.item_id != activity_id
                ):
                    logfire.warn(
                        "Comment not found in thread",
                        activity_id=activity_id,
                        comment_id=comment_id,
                    )
                    raise NotFoundError("Comment", str(comment_id))

                subtree = await self._collect_subtree(comment_id)
                async with self.activity_repository.savepoint():
                    await self.activity_repository.delete_by_ids(subtree)
                    stale = await self._rebuild_thread(activity_id)
            except StoreError as e:
                logfire.error(
                    "Comment delete failed", comment_id=comment_id, error=str(e)
                )
                return False

            await self.pagination_service.invalidate_listings()
            for deleted_id in [*subtree, *stale]:
                await self._forget(deleted_id)

            logfire.info(
                "Comment deleted",
                comment_id=comment_id,
                activity_id=activity_id,
                removed=len(subtree),
            )
            return subtree

    async def _collect_subtree(self, node_id: ActivityId) -> list[ActivityId]:
        """Node id followed by all its descendant comment ids."""
        collected = [node_id]
        for child_id in await self.activity_repository.find_child_ids(node_id):
            collected.extend(await self._collect_subtree(child_id))
        return collected

    async def _rebuild_thread(self, activity_id: ActivityId) -> list[ActivityId]:
        """Renumber a thread.

        Returns:
            Ids whose cached boundaries are now stale: the root and its comments
        """
        await self.tree_rebuilder.rebuild(activity_id, 1)
        comment_ids = await self.activity_repository.find_comment_ids([activity_id])
        return [activity_id, *comment_ids]

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def get_id(self, criteria: ActivityCriteria) -> Optional[ActivityId]:
        """Id of the first activity matching criteria (None for empty criteria)."""
        if criteria.is_empty():
            return None
        ids = await self.activity_repository.find_ids_by_criteria(
            criteria.as_dict(), limit=1
        )
        return ids[0] if ids else None

    async def check_exists_by_content(self, content: str) -> Optional[ActivityId]:
        """Id of an activity with exactly this content, if any."""
        return await self.activity_repository.find_id_by_content(content)

    async def get_recorded_components(
        self, skip_last_activity: bool = True
    ) -> list[str]:
        """Components that have recorded activity."""
        return await self.activity_repository.get_recorded_components(
            skip_last_activity=skip_last_activity
        )

    async def get_last_updated(self) -> Optional[datetime]:
        """Timestamp of the newest activity."""
        return await self.activity_repository.get_last_updated()

    async def hide_all_for_user(self, user_id: UserId) -> int:
        """Hide every activity of a user from sitewide listings."""
        with logfire.span("activity_service.hide_all_for_user", user_id=user_id):
            ids = await self.activity_repository.find_ids_by_criteria(
                {"user_id": user_id}
            )
            hidden = await self.activity_repository.hide_all_for_user(user_id)

            await self.pagination_service.invalidate_listings()
            for activity_id in ids:
                await self._forget(activity_id)

            logfire.info("Activities hidden for user", user_id=user_id, count=hidden)
            return hidden

    # ------------------------------------------------------------------
    # Meta
    # ------------------------------------------------------------------

    async def update_meta(
        self, activity_id: ActivityId, meta_key: str, meta_value: str
    ) -> None:
        await self.activity_repository.update_meta(activity_id, meta_key, meta_value)
        await self.pagination_service.invalidate_listings()

    async def get_meta(
        self, activity_id: ActivityId, meta_key: Optional[str] = None
    ) -> dict[str, list[str]]:
        return await self.activity_repository.get_meta(activity_id, meta_key)

    async def delete_meta(
        self, activity_id: ActivityId, meta_key: Optional[str] = None
    ) -> int:
        deleted = await self.activity_repository.delete_meta(activity_id, meta_key)
        if deleted:
            await self.pagination_service.invalidate_listings()
        return deleted

    # ------------------------------------------------------------------
    # Cache invalidation
    # ------------------------------------------------------------------

    async def _forget(self, activity_id: ActivityId) -> None:
        """Drop per-id and comment-tree entries of one activity."""
        await self.cache.delete(CacheGroup.ACTIVITY_ITEM.value, str(activity_id))
        await self.comment_tree_service.invalidate(activity_id)

    async def _invalidate_activity(self, activity: Activity) -> None:
        await self.pagination_service.invalidate_listings()
        await self._forget(activity.id)
        if activity.is_comment:
            await self.comment_tree_service.invalidate(ActivityId(activity.item_id))
            if activity.secondary_item_id != activity.item_id:
                await self.comment_tree_service.invalidate(
                    ActivityId(activity.secondary_item_id)
                )
