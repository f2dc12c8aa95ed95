"""Listing result model."""

from typing import Optional

from pydantic import Field

from feedline.domain.model.common import DomainModel
from feedline.domain.model.item import ActivityItem
from feedline.domain.value import ActivityId


class ActivityListing(DomainModel):
    """Result of an activity query.

    ``activities`` holds enriched items, or bare ids when the query asked
    for ``fields="ids"``. ``total`` is only set when a count was requested.
    """

    activities: list[ActivityItem] | list[ActivityId] = Field(default_factory=list)
    total: Optional[int] = None
    has_more_items: bool = False
