"""Post comment use case."""

from typing import Optional

import logfire
from pydantic import BaseModel

from feedline.application.usecase.base import BaseUseCase
from feedline.domain.error import DomainError
from feedline.domain.model import Activity
from feedline.domain.service import ActivityService
from feedline.domain.value import ActivityId, UserId


class PostCommentRequest(BaseModel):
    """Post comment request."""

    activity_id: int
    user_id: int
    content: str
    parent_id: Optional[int] = None  # Comment being replied to


class PostCommentResponse(BaseModel):
    """Post comment response."""

    comment: Activity


class PostCommentUseCase(BaseUseCase):
    """Use case for commenting on an activity."""

    def __init__(self, activity_service: ActivityService) -> None:
        self.activity_service = activity_service

    async def execute(self, request: PostCommentRequest) -> PostCommentResponse:
        """Add the comment and renumber the thread.

        Raises:
            ActivityValidationError: If the content is empty
            NotFoundError: If the activity or parent doesn't exist
            BusinessRuleViolationError: If the parent is in another thread
            DomainError: If the store failed
        """
        comment = await self.activity_service.add_comment(
            activity_id=ActivityId(request.activity_id),
            user_id=UserId(request.user_id),
            content=request.content,
            parent_id=(
                ActivityId(request.parent_id) if request.parent_id is not None else None
            ),
        )
        if comment is False:
            logfire.error(
                "Comment could not be stored", activity_id=request.activity_id
            )
            raise DomainError("Comment could not be saved")
        return PostCommentResponse(comment=comment)
