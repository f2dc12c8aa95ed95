"""Unit tests for TreeRebuilder."""

import pytest

from feedline.domain.repository import ActivityRepository
from feedline.domain.service import TreeRebuilder
from tests.factories import make_activity, make_comment
from tests.harness import create_env_fixture

# Unit test fixture - SQLite and in-memory cache
unit_env = create_env_fixture()


async def _thread(repo: ActivityRepository):
    """Activity with comments c1 (direct), c2 (reply to c1), c3 (direct)."""
    root = await repo.insert(make_activity())
    c1 = await repo.insert(make_comment(root.id, root.id, minutes=1))
    c2 = await repo.insert(make_comment(root.id, c1.id, minutes=2))
    c3 = await repo.insert(make_comment(root.id, root.id, minutes=3))
    return root, c1, c2, c3


async def _boundaries(repo: ActivityRepository, *activities):
    result = []
    for activity in activities:
        stored = await repo.find_by_id(activity.id)
        result.append((stored.mptt_left, stored.mptt_right))
    return result


class TestRebuild:
    """Tests for nested-set numbering."""

    @pytest.mark.asyncio
    async def test_numbers_thread_depth_first(self, unit_env):
        """Children are numbered in id order, depth first."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        rebuilder = await unit_env.get(TreeRebuilder)
        root, c1, c2, c3 = await _thread(repo)

        # Act
        next_value = await rebuilder.rebuild(root.id, 1)

        # Assert
        assert next_value == 9
        assert await _boundaries(repo, root, c1, c2, c3) == [
            (1, 8),
            (2, 5),
            (3, 4),
            (6, 7),
        ]

    @pytest.mark.asyncio
    async def test_descendants_lie_inside_ancestor_boundaries(self, unit_env):
        """Every comment's range is contained in its parent's range."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        rebuilder = await unit_env.get(TreeRebuilder)
        root, c1, c2, c3 = await _thread(repo)

        # Act
        await rebuilder.rebuild(root.id, 1)

        # Assert
        (root_l, root_r), (c1_l, c1_r), (c2_l, c2_r), (c3_l, c3_r) = (
            await _boundaries(repo, root, c1, c2, c3)
        )
        assert root_l < c1_l < c2_l < c2_r < c1_r < root_r
        assert c1_r < c3_l < c3_r < root_r

    @pytest.mark.asyncio
    async def test_rebuild_is_idempotent(self, unit_env):
        """Rebuilding an unchanged thread yields the same numbering."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        rebuilder = await unit_env.get(TreeRebuilder)
        root, c1, c2, c3 = await _thread(repo)
        await rebuilder.rebuild(root.id, 1)
        first = await _boundaries(repo, root, c1, c2, c3)

        # Act
        await rebuilder.rebuild(root.id, 1)

        # Assert
        assert await _boundaries(repo, root, c1, c2, c3) == first

    @pytest.mark.asyncio
    async def test_activity_without_comments(self, unit_env):
        """A lone activity gets the boundaries (1, 2)."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        rebuilder = await unit_env.get(TreeRebuilder)
        root = await repo.insert(make_activity())

        # Act
        next_value = await rebuilder.rebuild(root.id, 1)

        # Assert
        assert next_value == 3
        assert await _boundaries(repo, root) == [(1, 2)]

    @pytest.mark.asyncio
    async def test_other_threads_are_untouched(self, unit_env):
        """Only the rebuilt thread is renumbered."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        rebuilder = await unit_env.get(TreeRebuilder)
        root, *_ = await _thread(repo)
        other = await repo.insert(make_activity(minutes=10))
        other_comment = await repo.insert(make_comment(other.id, other.id, minutes=11))

        # Act
        await rebuilder.rebuild(root.id, 1)

        # Assert
        assert await _boundaries(repo, other, other_comment) == [(0, 0), (0, 0)]
