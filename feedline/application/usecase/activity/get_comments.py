"""Get comments use case."""

from pydantic import BaseModel

from feedline.application.usecase.base import BaseUseCase
from feedline.domain.model import CommentNode
from feedline.domain.service import ActivityService
from feedline.domain.value import ActivityId, SpamPolicy


class GetCommentsRequest(BaseModel):
    """Get comments request."""

    activity_id: int
    spam: SpamPolicy = SpamPolicy.HAM_ONLY


class GetCommentsResponse(BaseModel):
    """Get comments response."""

    activity_id: int
    comments: list[CommentNode]
    total: int


class GetCommentsUseCase(BaseUseCase):
    """Use case for reading an activity's comment forest."""

    def __init__(self, activity_service: ActivityService) -> None:
        self.activity_service = activity_service

    async def execute(self, request: GetCommentsRequest) -> GetCommentsResponse:
        """Fetch the comment forest.

        Raises:
            NotFoundError: If the activity doesn't exist
        """
        forest = await self.activity_service.get_comments(
            ActivityId(request.activity_id), request.spam
        )
        total = sum(1 for root in forest for _ in root.walk())
        return GetCommentsResponse(
            activity_id=request.activity_id, comments=forest, total=total
        )
