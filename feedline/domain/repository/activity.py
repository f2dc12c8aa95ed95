"""Activity repository interface."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, AsyncContextManager, Iterable, List, Optional

from feedline.domain.model.activity import Activity
from feedline.domain.query import ComposedQuery
from feedline.domain.value import ActivityId, SpamPolicy, UserId


class ActivityRepository(ABC):
    """Repository for Activity rows and their meta.

    Defines the contract for activity persistence operations. Store
    failures surface as StoreError. Implementations live in the
    infrastructure layer.
    """

    @abstractmethod
    async def find_by_id(self, activity_id: ActivityId) -> Optional[Activity]:
        """Find an activity by ID.

        Args:
            activity_id: The activity's unique identifier

        Returns:
            The activity if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_ids(self, activity_ids: Iterable[ActivityId]) -> List[Activity]:
        """Batch lookup of activities, in no particular order.

        Args:
            activity_ids: Activity identifiers

        Returns:
            Activities that exist
        """
        pass

    @abstractmethod
    async def query_ids(
        self, composed: ComposedQuery, limit: Optional[int] = None, offset: int = 0
    ) -> List[ActivityId]:
        """Return distinct ids matching a composed query, in listing order.

        Args:
            composed: Output of the query composer
            limit: Maximum number of ids (None for no limit)
            offset: Number of ids to skip

        Returns:
            Ordered activity ids
        """
        pass

    @abstractmethod
    async def count(self, composed: ComposedQuery) -> int:
        """Count distinct ids matching a composed query."""
        pass

    @abstractmethod
    def describe_ids_query(
        self, composed: ComposedQuery, limit: Optional[int] = None, offset: int = 0
    ) -> str:
        """Render the id query as deterministic text (statement plus parameters).

        Used as the cache key source for listings.
        """
        pass

    @abstractmethod
    def describe_count_query(self, composed: ComposedQuery) -> str:
        """Render the count query as deterministic text."""
        pass

    @abstractmethod
    async def insert(self, activity: Activity) -> Activity:
        """Insert a new activity.

        Args:
            activity: Activity without an id

        Returns:
            The activity with its store-assigned id
        """
        pass

    @abstractmethod
    async def update(self, activity: Activity) -> Activity:
        """Update an existing activity in place.

        Nested-set boundaries are never written here.

        Args:
            activity: Activity with an id

        Returns:
            The updated activity
        """
        pass

    @abstractmethod
    async def find_ids_by_criteria(
        self, criteria: dict[str, Any], limit: Optional[int] = None
    ) -> List[ActivityId]:
        """Find ids of activities matching exact-value criteria.

        Args:
            criteria: Column name to value, AND-combined
            limit: Maximum number of ids

        Returns:
            Matching ids ordered by id
        """
        pass

    @abstractmethod
    async def delete_where(self, criteria: dict[str, Any]) -> List[ActivityId]:
        """Delete activities matching exact-value criteria, with their meta.

        Args:
            criteria: Column name to value, AND-combined

        Returns:
            Ids of the deleted activities
        """
        pass

    @abstractmethod
    async def delete_by_ids(self, activity_ids: Iterable[ActivityId]) -> None:
        """Delete activities and their meta by id."""
        pass

    @abstractmethod
    def savepoint(self) -> AsyncContextManager[None]:
        """Group writes so a failure part way through undoes all of them.

        Raises:
            StoreError: If the savepoint itself cannot be opened or released
        """
        pass

    @abstractmethod
    async def find_comment_ids(
        self, item_ids: Iterable[ActivityId]
    ) -> List[ActivityId]:
        """Ids of comments whose top-level activity is one of ``item_ids``."""
        pass

    @abstractmethod
    async def find_child_ids(self, parent_id: ActivityId) -> List[ActivityId]:
        """Ids of direct child comments of a node, ordered by id.

        Args:
            parent_id: Top-level activity or comment id

        Returns:
            Child comment ids
        """
        pass

    @abstractmethod
    async def find_descendant_ids(
        self,
        top_level_id: ActivityId,
        left: int,
        right: int,
        spam: SpamPolicy = SpamPolicy.HAM_ONLY,
    ) -> List[ActivityId]:
        """Ids of comments strictly inside a nested-set range.

        Args:
            top_level_id: Top-level activity the thread belongs to
            left: Exclusive lower boundary
            right: Exclusive upper boundary
            spam: Spam policy

        Returns:
            Comment ids ordered by date recorded, then id
        """
        pass

    @abstractmethod
    async def update_boundaries(
        self,
        activity_id: ActivityId,
        left: int,
        right: int,
        comments_only: bool = True,
    ) -> None:
        """Persist nested-set boundaries of one node.

        Args:
            activity_id: Node id
            left: Left boundary
            right: Right boundary
            comments_only: Restrict the update to comment rows
        """
        pass

    @abstractmethod
    async def get_recorded_components(
        self, skip_last_activity: bool = True
    ) -> List[str]:
        """Distinct components that have recorded activity, sorted."""
        pass

    @abstractmethod
    async def get_last_updated(self) -> Optional[datetime]:
        """Timestamp of the most recently recorded activity."""
        pass

    @abstractmethod
    async def find_id_by_content(self, content: str) -> Optional[ActivityId]:
        """Id of an activity with exactly this content, if any."""
        pass

    @abstractmethod
    async def hide_all_for_user(self, user_id: UserId) -> int:
        """Mark all of a user's activities hidden; returns rows affected."""
        pass

    @abstractmethod
    async def update_meta(
        self, activity_id: ActivityId, meta_key: str, meta_value: str
    ) -> None:
        """Set a meta value, replacing any existing values for the key."""
        pass

    @abstractmethod
    async def get_meta(
        self, activity_id: ActivityId, meta_key: Optional[str] = None
    ) -> dict[str, List[str]]:
        """Meta values of an activity grouped by key."""
        pass

    @abstractmethod
    async def delete_meta(
        self, activity_id: ActivityId, meta_key: Optional[str] = None
    ) -> int:
        """Delete one key (or all meta) of an activity; returns rows deleted."""
        pass
