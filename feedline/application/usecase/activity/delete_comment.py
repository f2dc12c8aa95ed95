"""Delete comment use case."""

from pydantic import BaseModel

from feedline.application.usecase.base import BaseUseCase
from feedline.domain.error import DomainError
from feedline.domain.service import ActivityService
from feedline.domain.value import ActivityId


class DeleteCommentRequest(BaseModel):
    """Delete comment request."""

    activity_id: int
    comment_id: int


class DeleteCommentResponse(BaseModel):
    """Delete comment response."""

    deleted_ids: list[int]


class DeleteCommentUseCase(BaseUseCase):
    """Use case for deleting a comment and its replies."""

    def __init__(self, activity_service: ActivityService) -> None:
        self.activity_service = activity_service

    async def execute(self, request: DeleteCommentRequest) -> DeleteCommentResponse:
        """Delete the comment subtree.

        Raises:
            NotFoundError: If the comment isn't part of the thread
            DomainError: If the store failed
        """
        deleted = await self.activity_service.delete_comment(
            ActivityId(request.activity_id), ActivityId(request.comment_id)
        )
        if deleted is False:
            raise DomainError("Comment could not be deleted")
        return DeleteCommentResponse(deleted_ids=list(deleted))
