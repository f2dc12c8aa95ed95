"""Unit tests for the activity use cases."""

import pytest

from feedline.application.usecase.activity import (
    DeleteActivityRequest,
    DeleteActivityUseCase,
    GetActivityRequest,
    GetActivityUseCase,
    GetCommentsRequest,
    GetCommentsUseCase,
    ListActivitiesRequest,
    ListActivitiesUseCase,
    PostActivityRequest,
    PostActivityUseCase,
    PostCommentRequest,
    PostCommentUseCase,
)
from feedline.config import ActivitySettings
from feedline.domain.error import ActivityValidationError, NotFoundError
from tests.harness import create_env_fixture

unit_env = create_env_fixture()


async def _post(unit_env, content: str = "Hello", **fields) -> int:
    use_case = await unit_env.get(PostActivityUseCase)
    response = await use_case.execute(
        PostActivityRequest(user_id=1, content=content, **fields)
    )
    return response.activity.id


class TestPostActivity:
    """Tests for PostActivityUseCase."""

    @pytest.mark.asyncio
    async def test_defaults_to_activity_update(self, unit_env):
        """Posts default to the activity component and update type."""
        # Arrange
        use_case = await unit_env.get(PostActivityUseCase)

        # Act
        response = await use_case.execute(
            PostActivityRequest(user_id=1, content="Hi")
        )

        # Assert
        assert response.activity.id is not None
        assert response.activity.component == "activity"
        assert response.activity.type == "activity_update"

    @pytest.mark.asyncio
    async def test_missing_content_raises(self, unit_env):
        """Validation failures surface as ActivityValidationError."""
        # Arrange
        use_case = await unit_env.get(PostActivityUseCase)

        # Act & Assert
        with pytest.raises(ActivityValidationError) as exc_info:
            await use_case.execute(PostActivityRequest(user_id=1, content=""))
        assert exc_info.value.code == "missing_content"


class TestListActivities:
    """Tests for ListActivitiesUseCase."""

    @pytest.mark.asyncio
    async def test_default_page_size_from_settings(self, unit_env):
        """Requests without per_page use the configured page size."""
        # Arrange
        use_case = await unit_env.get(ListActivitiesUseCase)
        settings = await unit_env.get(ActivitySettings)
        await _post(unit_env)

        # Act
        response = await use_case.execute(ListActivitiesRequest())

        # Assert
        assert response.per_page == settings.per_page
        assert response.page == 1
        assert len(response.activities) == 1
        assert response.has_more_items is False

    @pytest.mark.asyncio
    async def test_string_parameters_are_normalized(self, unit_env):
        """Comma separated lists and flags are parsed into the query."""
        # Arrange
        use_case = await unit_env.get(ListActivitiesUseCase)
        first = await _post(unit_env, "One")
        second = await _post(unit_env, "Two")
        await _post(unit_env, "Three")

        # Act
        response = await use_case.execute(
            ListActivitiesRequest(
                in_ids=f"{first},{second}",
                fields="ids",
                sort="asc",
                order_by="id",
                count_total=True,
                per_page=1,
            )
        )

        # Assert
        assert response.activities == [first]
        assert response.total == 2
        assert response.has_more_items is True


class TestGetActivity:
    """Tests for GetActivityUseCase."""

    @pytest.mark.asyncio
    async def test_missing_activity_raises(self, unit_env):
        """Unknown ids raise NotFoundError."""
        # Arrange
        use_case = await unit_env.get(GetActivityUseCase)

        # Act & Assert
        with pytest.raises(NotFoundError):
            await use_case.execute(GetActivityRequest(activity_id=404))

    @pytest.mark.asyncio
    async def test_returns_enriched_activity(self, unit_env):
        """The activity comes back with its generated action."""
        # Arrange
        use_case = await unit_env.get(GetActivityUseCase)
        activity_id = await _post(unit_env)

        # Act
        response = await use_case.execute(GetActivityRequest(activity_id=activity_id))

        # Assert
        assert response.activity.id == activity_id
        assert response.activity.action == "User 1 posted an update"


class TestComments:
    """Tests for PostCommentUseCase and GetCommentsUseCase."""

    @pytest.mark.asyncio
    async def test_comment_totals_count_every_node(self, unit_env):
        """The total counts replies at every depth."""
        # Arrange
        post_comment = await unit_env.get(PostCommentUseCase)
        get_comments = await unit_env.get(GetCommentsUseCase)
        activity_id = await _post(unit_env)
        first = await post_comment.execute(
            PostCommentRequest(activity_id=activity_id, user_id=2, content="One")
        )
        await post_comment.execute(
            PostCommentRequest(
                activity_id=activity_id,
                user_id=3,
                content="Two",
                parent_id=first.comment.id,
            )
        )

        # Act
        response = await get_comments.execute(
            GetCommentsRequest(activity_id=activity_id)
        )

        # Assert
        assert response.total == 2
        assert len(response.comments) == 1
        assert response.comments[0].children[0].item.content == "Two"


class TestDeleteActivity:
    """Tests for DeleteActivityUseCase."""

    @pytest.mark.asyncio
    async def test_delete_returns_ids(self, unit_env):
        """Deleted ids are reported."""
        # Arrange
        use_case = await unit_env.get(DeleteActivityUseCase)
        activity_id = await _post(unit_env)

        # Act
        response = await use_case.execute(
            DeleteActivityRequest(activity_id=activity_id)
        )

        # Assert
        assert response.deleted_ids == [activity_id]

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self, unit_env):
        """Deleting an unknown id raises NotFoundError."""
        # Arrange
        use_case = await unit_env.get(DeleteActivityUseCase)

        # Act & Assert
        with pytest.raises(NotFoundError):
            await use_case.execute(DeleteActivityRequest(activity_id=404))
