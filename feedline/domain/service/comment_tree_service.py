"""Comment tree engine.

Threads are stored as a nested set: every comment of a top-level activity
carries ``mptt_left``/``mptt_right`` boundaries, so all comments below a
node are the rows whose left boundary lies strictly between the node's
boundaries. The engine fetches those rows, rebuilds the forest in memory
from ``secondary_item_id`` (the direct parent) and caches the result per
activity.
"""

from dataclasses import dataclass, field
from typing import Optional

import logfire

from feedline.domain.model import Activity, ActivityItem, CommentNode
from feedline.domain.repository import ActivityCache, ActivityRepository
from feedline.domain.value import (
    NO_COMMENTS,
    ActivityId,
    CacheGroup,
    SpamPolicy,
)

from .base import Service
from .materializer import Materializer


@dataclass
class _Branch:
    """Mutable node used while assembling a forest."""

    item: ActivityItem
    depth: int = 1
    children: list["_Branch"] = field(default_factory=list)

    def freeze(self) -> CommentNode:
        return CommentNode(
            item=self.item,
            depth=self.depth,
            children=[child.freeze() for child in self.children],
        )


class CommentTreeService(Service):
    """Builds, caches and attaches comment forests."""

    def __init__(
        self,
        activity_repository: ActivityRepository,
        materializer: Materializer,
        cache: ActivityCache,
    ) -> None:
        """Initialize comment tree service.

        Args:
            activity_repository: Activity repository
            materializer: Used to enrich comment rows
            cache: Activity cache (``activity_comments`` group)
        """
        self.activity_repository = activity_repository
        self.materializer = materializer
        self.cache = cache

    async def get_comment_tree(
        self,
        activity_id: ActivityId,
        left: int,
        right: int,
        spam: SpamPolicy = SpamPolicy.HAM_ONLY,
        top_level_parent_id: Optional[ActivityId] = None,
    ) -> Optional[list[CommentNode]]:
        """Get the comment forest below a node.

        Args:
            activity_id: Node whose comments are wanted (cache key)
            left: Node's left boundary
            right: Node's right boundary
            spam: Spam policy for comments
            top_level_parent_id: Top-level activity of the thread, when
                ``activity_id`` is itself a comment

        Returns:
            Root-level comment nodes in creation order, or None when the
            node has no comments
        """
        with logfire.span(
            "comment_tree_service.get_comment_tree",
            activity_id=activity_id,
            left=left,
            right=right,
        ):
            key = str(activity_id)
            cached = await self.cache.get(CacheGroup.ACTIVITY_COMMENTS.value, key)
            if cached == NO_COMMENTS:
                logfire.debug("Comment tree tombstone hit", activity_id=activity_id)
                return None
            if cached is not None:
                return [CommentNode.model_validate(node) for node in cached]

            top_level_id = top_level_parent_id or activity_id
            ids = await self.activity_repository.find_descendant_ids(
                top_level_id, left, right, spam
            )
            if not ids:
                await self.cache.set(
                    CacheGroup.ACTIVITY_COMMENTS.value, key, NO_COMMENTS
                )
                logfire.info("No comments for activity", activity_id=activity_id)
                return None

            items = await self.materializer.materialize(ids)
            forest = await self.build_forest(items)

            await self.cache.set(
                CacheGroup.ACTIVITY_COMMENTS.value,
                key,
                [node.model_dump(mode="json") for node in forest],
            )
            logfire.info(
                "Comment tree built",
                activity_id=activity_id,
                comments=len(items),
                roots=len(forest),
            )
            return forest

    async def build_forest(self, items: list[ActivityItem]) -> list[CommentNode]:
        """Assemble comment items (in creation order) into a forest.

        A comment whose parent was already placed becomes that parent's
        child; any other comment is placed at root level.
        """
        arena: dict[int, _Branch] = {}
        roots: list[_Branch] = []

        for item in items:
            branch = _Branch(item=item)
            parent = arena.get(item.secondary_item_id)
            if parent is not None:
                parent.children.append(branch)
            else:
                roots.append(branch)
            arena[item.id] = branch

        fetched: dict[int, Optional[Activity]] = {}
        for branch in arena.values():
            branch.depth = await self._depth(branch.item, arena, fetched)

        return [root.freeze() for root in roots]

    async def _depth(
        self,
        item: ActivityItem,
        arena: dict[int, _Branch],
        fetched: dict[int, Optional[Activity]],
    ) -> int:
        """Distance from the top-level activity, walking up direct parents.

        Parents missing from the arena are fetched from the store: a comment
        parent lets the walk continue, anything else ends it.
        """
        depth = 1
        parent_id = item.secondary_item_id
        visited: set[int] = {item.id}

        while parent_id != item.item_id:
            if parent_id in visited:
                logfire.warn(
                    "Cycle in comment thread, truncating depth",
                    activity_id=item.id,
                    parent_id=parent_id,
                )
                break
            visited.add(parent_id)
            depth += 1

            if parent_id in arena:
                parent_id = arena[parent_id].item.secondary_item_id
                continue

            # Parent is outside the fetched range (e.g. listing a sub-thread)
            if parent_id not in fetched:
                fetched[parent_id] = await self.activity_repository.find_by_id(
                    ActivityId(parent_id)
                )
            parent = fetched[parent_id]

            if parent is None:
                logfire.warn(
                    "Missing parent in comment thread, truncating depth",
                    activity_id=item.id,
                    parent_id=parent_id,
                )
                parent_id = item.item_id
            elif parent.is_comment:
                parent_id = parent.secondary_item_id
            else:
                parent_id = item.item_id

        return depth

    async def append_comments(
        self, items: list[ActivityItem], spam: SpamPolicy = SpamPolicy.HAM_ONLY
    ) -> list[ActivityItem]:
        """Attach each item's comment forest as ``children``.

        Comment items (listed in stream mode) use their own top-level
        activity as the thread root.
        """
        with logfire.span("comment_tree_service.append_comments", count=len(items)):
            result = []
            for item in items:
                top_level_parent_id = (
                    ActivityId(item.item_id) if item.is_comment else None
                )
                forest = await self.get_comment_tree(
                    item.id,
                    item.mptt_left,
                    item.mptt_right,
                    spam,
                    top_level_parent_id,
                )
                result.append(
                    item.model_copy(update={"children": forest}) if forest else item
                )
            return result

    async def invalidate(self, activity_id: ActivityId) -> None:
        """Drop the cached tree of an activity."""
        await self.cache.delete(CacheGroup.ACTIVITY_COMMENTS.value, str(activity_id))
        logfire.debug("Comment tree cache invalidated", activity_id=activity_id)
