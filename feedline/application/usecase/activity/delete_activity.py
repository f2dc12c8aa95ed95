"""Delete activity use case."""

from pydantic import BaseModel

from feedline.application.usecase.base import BaseUseCase
from feedline.domain.error import NotFoundError
from feedline.domain.query import ActivityCriteria
from feedline.domain.service import ActivityService


class DeleteActivityRequest(BaseModel):
    """Delete activity request."""

    activity_id: int


class DeleteActivityResponse(BaseModel):
    """Delete activity response."""

    deleted_ids: list[int]


class DeleteActivityUseCase(BaseUseCase):
    """Use case for deleting an activity together with its comments."""

    def __init__(self, activity_service: ActivityService) -> None:
        self.activity_service = activity_service

    async def execute(self, request: DeleteActivityRequest) -> DeleteActivityResponse:
        """Delete the activity.

        Raises:
            NotFoundError: If nothing was deleted
        """
        deleted = await self.activity_service.delete(
            ActivityCriteria(id=request.activity_id)
        )
        if deleted is False:
            raise NotFoundError("Activity", str(request.activity_id))
        return DeleteActivityResponse(deleted_ids=list(deleted))
