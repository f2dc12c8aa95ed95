"""List activities use case."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from feedline.application.usecase.base import BaseUseCase
from feedline.domain.model import ActivityItem
from feedline.domain.query import ActivityQuery
from feedline.domain.service import ActivityService


class ListActivitiesRequest(BaseModel):
    """List activities request.

    Mirrors the listing parameters; structured sub-queries are passed as
    already decoded trees.
    """

    page: int = Field(default=1, ge=0)
    per_page: Optional[int] = Field(default=None, ge=0)
    max: Optional[int] = Field(default=None, ge=0)
    fields: Literal["all", "ids"] = "all"
    sort: str = "DESC"
    order_by: str = "date_recorded"
    scope: Optional[str] = None
    user_id: Optional[int] = None
    search_terms: Optional[str] = None
    display_comments: Optional[str] = None
    show_hidden: bool = False
    spam: str = "ham_only"
    exclude: Optional[str] = None
    in_ids: Optional[str] = None
    user_id__in: Optional[str] = None
    user_id__not_in: Optional[str] = None
    filter: dict[str, Any] = Field(default_factory=dict)
    filter_query: Any = None
    meta_query: Any = None
    date_query: Any = None
    count_total: bool = False


class ListActivitiesResponse(BaseModel):
    """List activities response."""

    activities: list[ActivityItem] | list[int]
    total: Optional[int] = None
    has_more_items: bool
    page: int
    per_page: int


class ListActivitiesUseCase(BaseUseCase):
    """Use case for running an activity listing."""

    def __init__(self, activity_service: ActivityService, default_per_page: int):
        """Initialize list activities use case.

        Args:
            activity_service: Activity domain service
            default_per_page: Page size when the request doesn't give one
        """
        self.activity_service = activity_service
        self.default_per_page = default_per_page

    async def execute(self, request: ListActivitiesRequest) -> ListActivitiesResponse:
        """Build the query, run it and shape the response.

        Args:
            request: Listing parameters

        Returns:
            One page of activities
        """
        params = request.model_dump(exclude_none=True)
        params["per_page"] = (
            request.per_page if request.per_page is not None else self.default_per_page
        )
        query = ActivityQuery.model_validate(params)

        listing = await self.activity_service.get(query)

        return ListActivitiesResponse(
            activities=listing.activities,
            total=listing.total,
            has_more_items=listing.has_more_items,
            page=query.page,
            per_page=query.per_page,
        )
