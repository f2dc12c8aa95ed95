"""Activity use cases."""

from .delete_activity import (
    DeleteActivityRequest,
    DeleteActivityResponse,
    DeleteActivityUseCase,
)
from .delete_comment import (
    DeleteCommentRequest,
    DeleteCommentResponse,
    DeleteCommentUseCase,
)
from .get_activity import GetActivityRequest, GetActivityResponse, GetActivityUseCase
from .get_comments import GetCommentsRequest, GetCommentsResponse, GetCommentsUseCase
from .list_activities import (
    ListActivitiesRequest,
    ListActivitiesResponse,
    ListActivitiesUseCase,
)
from .post_activity import (
    PostActivityRequest,
    PostActivityResponse,
    PostActivityUseCase,
)
from .post_comment import PostCommentRequest, PostCommentResponse, PostCommentUseCase

__all__ = [
    "DeleteActivityRequest",
    "DeleteActivityResponse",
    "DeleteActivityUseCase",
    "DeleteCommentRequest",
    "DeleteCommentResponse",
    "DeleteCommentUseCase",
    "GetActivityRequest",
    "GetActivityResponse",
    "GetActivityUseCase",
    "GetCommentsRequest",
    "GetCommentsResponse",
    "GetCommentsUseCase",
    "ListActivitiesRequest",
    "ListActivitiesResponse",
    "ListActivitiesUseCase",
    "PostActivityRequest",
    "PostActivityResponse",
    "PostActivityUseCase",
    "PostCommentRequest",
    "PostCommentResponse",
    "PostCommentUseCase",
]
