"""Post activity use case."""

import logfire
from pydantic import BaseModel

from feedline.application.usecase.base import BaseUseCase
from feedline.domain.error import ActivityValidationError, DomainError
from feedline.domain.model import Activity
from feedline.domain.service import ActivityService
from feedline.domain.value import UPDATE_TYPE, ErrorType, UserId


class PostActivityRequest(BaseModel):
    """Post activity request."""

    user_id: int
    content: str = ""
    component: str = "activity"
    type: str = UPDATE_TYPE
    action: str = ""
    primary_link: str = ""
    item_id: int = 0
    secondary_item_id: int = 0
    hide_sitewide: bool = False


class PostActivityResponse(BaseModel):
    """Post activity response."""

    activity: Activity


class PostActivityUseCase(BaseUseCase):
    """Use case for recording a new activity."""

    def __init__(self, activity_service: ActivityService) -> None:
        """Initialize post activity use case.

        Args:
            activity_service: Activity domain service
        """
        self.activity_service = activity_service

    async def execute(self, request: PostActivityRequest) -> PostActivityResponse:
        """Validate and save the activity.

        Args:
            request: Activity fields

        Returns:
            The stored activity

        Raises:
            ActivityValidationError: If a required field is missing
            DomainError: If the store rejected the activity
        """
        activity = Activity(
            user_id=UserId(request.user_id),
            component=request.component,
            type=request.type,
            action=request.action,
            content=request.content,
            primary_link=request.primary_link,
            item_id=request.item_id,
            secondary_item_id=request.secondary_item_id,
            hide_sitewide=request.hide_sitewide,
        )

        saved = await self.activity_service.save(activity, error_type=ErrorType.ERROR)
        if isinstance(saved, ActivityValidationError):
            raise saved
        if saved is False:
            logfire.error("Activity could not be stored", type=request.type)
            raise DomainError("Activity could not be saved")

        return PostActivityResponse(activity=saved)
