"""Unit tests for Materializer."""

import pytest

from feedline.domain.repository import (
    ActivityCache,
    ActivityRepository,
    UserRepository,
)
from feedline.domain.service import (
    ActionStringRegistry,
    Materializer,
    MutedUsersPolicy,
)
from feedline.domain.value import ActivityId
from feedline.persistence.repository.inmemory import InMemoryProfileRepository
from tests.factories import make_activity, make_user
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


async def _build(unit_env, **kwargs) -> Materializer:
    """Materializer wired to the test container's collaborators."""
    return Materializer(
        activity_repository=await unit_env.get(ActivityRepository),
        user_repository=await unit_env.get(UserRepository),
        cache=await unit_env.get(ActivityCache),
        action_registry=await unit_env.get(ActionStringRegistry),
        **kwargs,
    )


class TestMaterialize:
    """Tests for loading and enriching activities."""

    @pytest.mark.asyncio
    async def test_preserves_requested_order(self, unit_env):
        """Items come back in the order of the given ids."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        materializer = await unit_env.get(Materializer)
        ids = [(await repo.insert(make_activity(minutes=i))).id for i in range(3)]
        wanted = [ids[2], ids[0], ids[1]]

        # Act
        items = await materializer.materialize(wanted)

        # Assert
        assert [item.id for item in items] == wanted

    @pytest.mark.asyncio
    async def test_skips_missing_ids(self, unit_env):
        """Ids that no longer exist are dropped without error."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        materializer = await unit_env.get(Materializer)
        activity = await repo.insert(make_activity())

        # Act
        items = await materializer.materialize([ActivityId(9999), activity.id])

        # Assert
        assert [item.id for item in items] == [activity.id]

    @pytest.mark.asyncio
    async def test_users_are_loaded_in_one_batch(self, unit_env):
        """Author details come from a single user lookup per call."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        users = await unit_env.get(UserRepository)
        materializer = await unit_env.get(Materializer)
        for user_id in (1, 2, 3):
            await users.save(make_user(user_id))
        ids = [
            (await repo.insert(make_activity(minutes=i, user_id=i % 3 + 1))).id
            for i in range(6)
        ]
        calls_before = users.batch_calls

        # Act
        items = await materializer.materialize(ids)

        # Assert
        assert users.batch_calls == calls_before + 1
        assert {item.user_login for item in items} == {"user1", "user2", "user3"}
        assert all(item.user_email.endswith("@example.com") for item in items)

    @pytest.mark.asyncio
    async def test_unknown_author_leaves_user_fields_empty(self, unit_env):
        """Activities of unknown users are still returned."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        materializer = await unit_env.get(Materializer)
        activity = await repo.insert(make_activity(user_id=42))

        # Act
        items = await materializer.materialize([activity.id])

        # Assert
        assert items[0].user_login is None
        assert items[0].action == "User 42 posted an update"

    @pytest.mark.asyncio
    async def test_generated_action_replaces_stored_one(self, unit_env):
        """Types with a generator get a display action string."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        users = await unit_env.get(UserRepository)
        materializer = await unit_env.get(Materializer)
        await users.save(make_user(1, login="ada"))
        activity = await repo.insert(make_activity())

        # Act
        items = await materializer.materialize([activity.id])

        # Assert
        assert items[0].action == "Ada posted an update"
        assert items[0].display_name == "Ada"

    @pytest.mark.asyncio
    async def test_stored_action_kept_without_generator(self, unit_env):
        """Types nobody registered keep their literal action."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        materializer = await unit_env.get(Materializer)
        activity = await repo.insert(
            make_activity(component="groups", type="joined_group")
        )

        # Act
        items = await materializer.materialize([activity.id])

        # Assert
        assert items[0].action == "stored action"

    @pytest.mark.asyncio
    async def test_items_are_cached_per_id(self, unit_env):
        """A cached item is served without touching the store."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        materializer = await unit_env.get(Materializer)
        activity = await repo.insert(make_activity(content="original"))
        await materializer.materialize([activity.id])
        await repo.update(activity.model_copy(update={"content": "changed"}))

        # Act
        cached = await materializer.materialize([activity.id])
        uncached = await materializer.materialize([activity.id], cache_results=False)

        # Assert
        assert cached[0].content == "original"
        assert uncached[0].content == "changed"


class TestEnrich:
    """Tests for full names, hooks and visibility."""

    @pytest.mark.asyncio
    async def test_full_names_come_from_profiles(self, unit_env):
        """With a profile repository, items carry the author's full name."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        profiles = InMemoryProfileRepository()
        await profiles.set_fullname(1, "Ada Lovelace")
        materializer = await _build(unit_env, profile_repository=profiles)
        mine = await repo.insert(make_activity(user_id=1))
        theirs = await repo.insert(make_activity(user_id=2))

        # Act
        items = await materializer.materialize([mine.id, theirs.id])

        # Assert
        assert items[0].user_fullname == "Ada Lovelace"
        assert items[1].user_fullname is None

    @pytest.mark.asyncio
    async def test_prefetch_hooks_run_before_action_strings(self, unit_env):
        """Hooks see every item and their changes feed action generation."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        seen: list[int] = []

        async def rename(items):
            seen.extend(item.id for item in items)
            return [
                item.model_copy(update={"display_name": "Hooked"}) for item in items
            ]

        materializer = await _build(unit_env, prefetch_hooks=[rename])
        first = await repo.insert(make_activity(minutes=1))
        second = await repo.insert(make_activity(minutes=2))

        # Act
        items = await materializer.materialize([first.id, second.id])

        # Assert
        assert seen == [first.id, second.id]
        assert all(item.action == "Hooked posted an update" for item in items)

    @pytest.mark.asyncio
    async def test_visibility_policy_filters_items(self, unit_env):
        """Items rejected by the policy are dropped."""
        # Arrange
        repo = await unit_env.get(ActivityRepository)
        materializer = await _build(
            unit_env, visibility_policy=MutedUsersPolicy({2})
        )
        visible = await repo.insert(make_activity(user_id=1))
        muted = await repo.insert(make_activity(user_id=2))

        # Act
        items = await materializer.materialize([visible.id, muted.id])

        # Assert
        assert [item.id for item in items] == [visible.id]
