"""Nested-set numbering of comment threads."""

import logfire

from feedline.domain.repository import ActivityRepository
from feedline.domain.value import ActivityId

from .base import Service


class TreeRebuilder(Service):
    """Renumbers ``mptt_left``/``mptt_right`` of a whole thread.

    Runs after every structural change to a thread. Concurrent rebuilds of
    the same thread interleave badly; callers must serialize them.
    """

    def __init__(self, activity_repository: ActivityRepository) -> None:
        """Initialize tree rebuilder.

        Args:
            activity_repository: Activity repository
        """
        self.activity_repository = activity_repository

    async def rebuild(self, node_id: ActivityId, left: int = 1) -> int:
        """Number a node and its descendants depth-first.

        Children are visited in id order. The top-level node (``left == 1``)
        is updated by id alone; nested nodes are only updated if they are
        comments.

        Args:
            node_id: Node to number
            left: Left boundary to assign

        Returns:
            The next free boundary value (``right + 1``)
        """
        if left == 1:
            with logfire.span("tree_rebuilder.rebuild", activity_id=node_id):
                next_value = await self._number(node_id, left)
                logfire.info(
                    "Comment tree rebuilt",
                    activity_id=node_id,
                    nodes=(next_value - 1) // 2,
                )
                return next_value
        return await self._number(node_id, left)

    async def _number(self, node_id: ActivityId, left: int) -> int:
        right = left + 1

        for child_id in await self.activity_repository.find_child_ids(node_id):
            right = await self._number(child_id, right)

        await self.activity_repository.update_boundaries(
            node_id, left, right, comments_only=left != 1
        )
        return right + 1
