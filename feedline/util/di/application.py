"""Application layer DI providers."""

from dishka import Scope, provide

from feedline.application.usecase.activity import (
    DeleteActivityUseCase,
    DeleteCommentUseCase,
    GetActivityUseCase,
    GetCommentsUseCase,
    ListActivitiesUseCase,
    PostActivityUseCase,
    PostCommentUseCase,
)
from feedline.config import ActivitySettings
from feedline.domain.service import ActivityService
from feedline.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Listings
    @provide(scope=Scope.REQUEST)
    def get_list_activities_use_case(
        self, activity_service: ActivityService, settings: ActivitySettings
    ) -> ListActivitiesUseCase:
        """Provide list activities use case."""
        return ListActivitiesUseCase(
            activity_service=activity_service, default_per_page=settings.per_page
        )

    @provide(scope=Scope.REQUEST)
    def get_get_activity_use_case(
        self, activity_service: ActivityService
    ) -> GetActivityUseCase:
        """Provide get activity use case."""
        return GetActivityUseCase(activity_service=activity_service)

    # Lifecycle
    @provide(scope=Scope.REQUEST)
    def get_post_activity_use_case(
        self, activity_service: ActivityService
    ) -> PostActivityUseCase:
        """Provide post activity use case."""
        return PostActivityUseCase(activity_service=activity_service)

    @provide(scope=Scope.REQUEST)
    def get_delete_activity_use_case(
        self, activity_service: ActivityService
    ) -> DeleteActivityUseCase:
        """Provide delete activity use case."""
        return DeleteActivityUseCase(activity_service=activity_service)

    # Comments
    @provide(scope=Scope.REQUEST)
    def get_get_comments_use_case(
        self, activity_service: ActivityService
    ) -> GetCommentsUseCase:
        """Provide get comments use case."""
        return GetCommentsUseCase(activity_service=activity_service)

    @provide(scope=Scope.REQUEST)
    def get_post_comment_use_case(
        self, activity_service: ActivityService
    ) -> PostCommentUseCase:
        """Provide post comment use case."""
        return PostCommentUseCase(activity_service=activity_service)

    @provide(scope=Scope.REQUEST)
    def get_delete_comment_use_case(
        self, activity_service: ActivityService
    ) -> DeleteCommentUseCase:
        """Provide delete comment use case."""
        return DeleteCommentUseCase(activity_service=activity_service)
