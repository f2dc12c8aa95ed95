"""Get activity use case."""

from pydantic import BaseModel

from feedline.application.usecase.base import BaseUseCase
from feedline.domain.error import NotFoundError
from feedline.domain.model import ActivityItem
from feedline.domain.service import ActivityService
from feedline.domain.value import ActivityId


class GetActivityRequest(BaseModel):
    """Get activity request."""

    activity_id: int


class GetActivityResponse(BaseModel):
    """Get activity response."""

    activity: ActivityItem


class GetActivityUseCase(BaseUseCase):
    """Use case for fetching one enriched activity."""

    def __init__(self, activity_service: ActivityService) -> None:
        self.activity_service = activity_service

    async def execute(self, request: GetActivityRequest) -> GetActivityResponse:
        """Fetch the activity.

        Raises:
            NotFoundError: If the activity doesn't exist
        """
        activity = await self.activity_service.get_by_id(
            ActivityId(request.activity_id)
        )
        if activity is None:
            raise NotFoundError("Activity", str(request.activity_id))
        return GetActivityResponse(activity=activity)
