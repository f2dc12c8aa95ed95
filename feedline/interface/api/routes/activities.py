"""Activity routes."""

import json
from typing import Any, Literal

import logfire
from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from feedline.application.usecase.activity import (
    DeleteActivityRequest,
    DeleteActivityResponse,
    DeleteActivityUseCase,
    DeleteCommentRequest,
    DeleteCommentResponse,
    DeleteCommentUseCase,
    GetActivityRequest,
    GetActivityResponse,
    GetActivityUseCase,
    GetCommentsRequest,
    GetCommentsResponse,
    GetCommentsUseCase,
    ListActivitiesRequest,
    ListActivitiesResponse,
    ListActivitiesUseCase,
    PostActivityRequest,
    PostActivityResponse,
    PostActivityUseCase,
    PostCommentRequest,
    PostCommentResponse,
    PostCommentUseCase,
)
from feedline.domain.error import (
    ActivityValidationError,
    BusinessRuleViolationError,
    DomainError,
    NotFoundError,
)
from feedline.domain.value import SpamPolicy

router = APIRouter(prefix="/activities", tags=["activities"], route_class=DishkaRoute)


def _decode_tree(name: str, raw: str | None) -> Any:
    """Decode a JSON encoded sub-query parameter."""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{name} must be valid JSON",
        )


@router.get("", response_model=ListActivitiesResponse)
async def list_activities(
    list_activities_use_case: FromDishka[ListActivitiesUseCase],
    page: int = Query(default=1, ge=0),
    per_page: int | None = Query(default=None, ge=0),
    max: int | None = Query(default=None, ge=0),
    fields: Literal["all", "ids"] = "all",
    sort: str = "DESC",
    order_by: str = "date_recorded",
    scope: str | None = None,
    user_id: int | None = None,
    filter_user_id: str | None = None,
    search_terms: str | None = None,
    display_comments: str | None = None,
    show_hidden: bool = False,
    spam: SpamPolicy = SpamPolicy.HAM_ONLY,
    exclude: str | None = None,
    in_ids: str | None = Query(default=None, alias="in"),
    user_id__in: str | None = None,
    user_id__not_in: str | None = None,
    object: str | None = None,
    action: str | None = None,
    primary_id: str | None = None,
    secondary_id: str | None = None,
    since: str | None = None,
    filter_query: str | None = None,
    meta_query: str | None = None,
    date_query: str | None = None,
    count_total: bool = False,
) -> ListActivitiesResponse:
    """List activities.

    Regular filters are flat parameters (comma separated lists), with
    ``filter_user_id`` restricting authors. ``user_id`` only tells scopes who
    is viewing. Filter, meta and date sub-queries are JSON encoded trees.

    Returns:
        One page of activities (or ids with ``fields=ids``)
    """
    activity_filter = {
        "user_id": filter_user_id,
        "object": object,
        "action": action,
        "primary_id": primary_id,
        "secondary_id": secondary_id,
        "since": since,
    }

    try:
        request = ListActivitiesRequest(
            page=page,
            per_page=per_page,
            max=max,
            fields=fields,
            sort=sort,
            order_by=order_by,
            scope=scope,
            user_id=user_id,
            search_terms=search_terms,
            display_comments=display_comments,
            show_hidden=show_hidden,
            spam=spam.value,
            exclude=exclude,
            in_ids=in_ids,
            user_id__in=user_id__in,
            user_id__not_in=user_id__not_in,
            filter={k: v for k, v in activity_filter.items() if v is not None},
            filter_query=_decode_tree("filter_query", filter_query),
            meta_query=_decode_tree("meta_query", meta_query),
            date_query=_decode_tree("date_query", date_query),
            count_total=count_total,
        )
        return await list_activities_use_case.execute(request)
    except PydanticValidationError as e:
        logfire.warn("Invalid activity listing parameters", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Invalid listing parameters",
        )


class PostActivityAPIRequest(BaseModel):
    """API request for recording an activity."""

    user_id: int
    content: str = Field(default="", max_length=65535)
    component: str = "activity"
    type: str = "activity_update"
    action: str = ""
    primary_link: str = ""
    item_id: int = 0
    secondary_item_id: int = 0
    hide_sitewide: bool = False


@router.post(
    "", response_model=PostActivityResponse, status_code=status.HTTP_201_CREATED
)
async def post_activity(
    request: PostActivityAPIRequest,
    post_activity_use_case: FromDishka[PostActivityUseCase],
) -> PostActivityResponse:
    """Record a new activity.

    Raises:
        HTTPException: 400 if a required field is missing
    """
    try:
        return await post_activity_use_case.execute(
            PostActivityRequest(**request.model_dump())
        )
    except ActivityValidationError as e:
        logfire.warn("Activity rejected", code=e.code)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DomainError as e:
        logfire.error("Activity could not be saved", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save activity",
        )


@router.get("/{activity_id}", response_model=GetActivityResponse)
async def get_activity(
    activity_id: int,
    get_activity_use_case: FromDishka[GetActivityUseCase],
) -> GetActivityResponse:
    """Get one activity."""
    try:
        return await get_activity_use_case.execute(
            GetActivityRequest(activity_id=activity_id)
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found"
        )


@router.delete("/{activity_id}", response_model=DeleteActivityResponse)
async def delete_activity(
    activity_id: int,
    delete_activity_use_case: FromDishka[DeleteActivityUseCase],
) -> DeleteActivityResponse:
    """Delete an activity together with its comments and meta."""
    try:
        return await delete_activity_use_case.execute(
            DeleteActivityRequest(activity_id=activity_id)
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found"
        )


@router.get("/{activity_id}/comments", response_model=GetCommentsResponse)
async def get_comments(
    activity_id: int,
    get_comments_use_case: FromDishka[GetCommentsUseCase],
    spam: SpamPolicy = SpamPolicy.HAM_ONLY,
) -> GetCommentsResponse:
    """Get the threaded comments of an activity."""
    try:
        return await get_comments_use_case.execute(
            GetCommentsRequest(activity_id=activity_id, spam=spam)
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found"
        )


class PostCommentAPIRequest(BaseModel):
    """API request for commenting on an activity."""

    user_id: int
    content: str = Field(min_length=1, max_length=65535)
    parent_id: int | None = None  # Comment being replied to


@router.post(
    "/{activity_id}/comments",
    response_model=PostCommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def post_comment(
    activity_id: int,
    request: PostCommentAPIRequest,
    post_comment_use_case: FromDishka[PostCommentUseCase],
) -> PostCommentResponse:
    """Comment on an activity or reply to one of its comments."""
    try:
        return await post_comment_use_case.execute(
            PostCommentRequest(
                activity_id=activity_id,
                user_id=request.user_id,
                content=request.content,
                parent_id=request.parent_id,
            )
        )
    except NotFoundError as e:
        logfire.warn("Comment target not found", error=str(e))
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except (ActivityValidationError, BusinessRuleViolationError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DomainError as e:
        logfire.error("Comment could not be saved", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to save comment",
        )


@router.delete(
    "/{activity_id}/comments/{comment_id}", response_model=DeleteCommentResponse
)
async def delete_comment(
    activity_id: int,
    comment_id: int,
    delete_comment_use_case: FromDishka[DeleteCommentUseCase],
) -> DeleteCommentResponse:
    """Delete a comment and all replies below it."""
    try:
        return await delete_comment_use_case.execute(
            DeleteCommentRequest(activity_id=activity_id, comment_id=comment_id)
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found"
        )
    except DomainError as e:
        logfire.error("Comment could not be deleted", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete comment",
        )
