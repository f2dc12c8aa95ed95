"""Listing query models.

An ActivityQuery describes one listing request: the predicates to apply,
ordering and pagination, plus flags controlling comments, counting and
caching. Values are normalized on construction so that two equivalent
requests always compose to the same statement.
"""

import re
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import Field, field_validator

from feedline.domain.model.common import DomainModel
from feedline.domain.value import (
    ACTIVITY_COLUMNS,
    DisplayComments,
    SortDirection,
    SpamPolicy,
)

SINCE_FORMAT = "%Y-%m-%d %H:%M:%S"
_SINCE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$")


def parse_list(value: Any) -> list[int | str]:
    """Split a comma separated string or sequence into clean values.

    Numeric entries become ints, everything else stays a stripped string.
    Empty entries are dropped.
    """
    if value is None or value is False or value == "":
        return []
    if isinstance(value, (int, str)):
        value = str(value).split(",")
    parsed: list[int | str] = []
    for entry in value:
        text = str(entry).strip()
        if not text:
            continue
        parsed.append(int(text) if text.lstrip("-").isdigit() else text)
    return parsed


def parse_id_list(value: Any) -> list[int]:
    """Parse ids into a list of unique non-negative ints, keeping order."""
    ids: list[int] = []
    for entry in parse_list(value):
        if isinstance(entry, str):
            continue
        entry = abs(entry)
        if entry not in ids:
            ids.append(entry)
    return ids


def deep_merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``overrides`` into a copy of ``base``.

    Nested dicts are merged key by key; any other value replaces the
    existing one.
    """
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ActivityFilter(DomainModel):
    """Regular filter map.

    List fields accept a list or a comma separated string.
    """

    user_id: list[int | str] = Field(default_factory=list)
    object: list[int | str] = Field(default_factory=list)  # component
    action: list[int | str] = Field(default_factory=list)  # type
    primary_id: list[int | str] = Field(default_factory=list)  # item_id
    secondary_id: list[int | str] = Field(default_factory=list)  # secondary_item_id
    offset: Optional[int] = None
    offset_lower: Optional[int] = None
    since: Optional[str] = None

    @field_validator(
        "user_id", "object", "action", "primary_id", "secondary_id", mode="before"
    )
    @classmethod
    def split_values(cls, v: Any) -> list[int | str]:
        return parse_list(v)

    @property
    def since_datetime(self) -> Optional[datetime]:
        """Parsed ``since`` bound, or None when it is not strictly formatted."""
        if not self.since or not _SINCE_PATTERN.match(self.since):
            return None
        try:
            return datetime.strptime(self.since, SINCE_FORMAT)
        except ValueError:
            return None


class ActivityQuery(DomainModel):
    """Parameters of an activity listing."""

    page: int = Field(default=1, ge=0)
    per_page: int = Field(default=25, ge=0)  # 0 disables pagination
    max: Optional[int] = Field(default=None, ge=0)
    fields: Literal["all", "ids"] = "all"
    sort: SortDirection = SortDirection.DESC
    order_by: str = "date_recorded"
    exclude: list[int] = Field(default_factory=list)
    in_ids: list[int] = Field(default_factory=list)
    meta_query: Any = None
    date_query: Any = None
    filter_query: Any = None
    user_id__in: list[int] = Field(default_factory=list)
    user_id__not_in: list[int] = Field(default_factory=list)
    filter: ActivityFilter = Field(default_factory=ActivityFilter)
    scope: list[str] = Field(default_factory=list)
    user_id: Optional[int] = None
    search_terms: Optional[str] = None
    display_comments: DisplayComments = DisplayComments.NONE
    show_hidden: bool = False
    spam: SpamPolicy = SpamPolicy.HAM_ONLY
    cache_results: bool = True
    count_total: bool = False
    count_total_only: bool = False

    @field_validator("sort", mode="before")
    @classmethod
    def normalize_sort(cls, v: Any) -> SortDirection:
        if isinstance(v, SortDirection):
            return v
        if isinstance(v, str) and v.upper() == "ASC":
            return SortDirection.ASC
        return SortDirection.DESC

    @field_validator("order_by", mode="before")
    @classmethod
    def whitelist_order_by(cls, v: Any) -> str:
        if v in ACTIVITY_COLUMNS:
            return v
        return "date_recorded"

    @field_validator(
        "exclude", "in_ids", "user_id__in", "user_id__not_in", mode="before"
    )
    @classmethod
    def parse_ids(cls, v: Any) -> list[int]:
        return parse_id_list(v)

    @field_validator("scope", mode="before")
    @classmethod
    def split_scope(cls, v: Any) -> list[str]:
        return [str(name) for name in parse_list(v)]

    @field_validator("display_comments", mode="before")
    @classmethod
    def normalize_display_comments(cls, v: Any) -> DisplayComments:
        if isinstance(v, DisplayComments):
            return v
        if v is True:
            return DisplayComments.STREAM
        if not v:
            return DisplayComments.NONE
        try:
            return DisplayComments(str(v).lower())
        except ValueError:
            return DisplayComments.NONE

    @field_validator("filter", mode="before")
    @classmethod
    def default_filter(cls, v: Any) -> Any:
        return v if v else {}

    @property
    def paginated(self) -> bool:
        """Whether a LIMIT/OFFSET window applies."""
        return self.page > 0 and self.per_page > 0

    def with_overrides(self, overrides: dict[str, Any]) -> "ActivityQuery":
        """Return a copy with ``overrides`` deep-merged into this query."""
        if not overrides:
            return self
        merged = deep_merge(self.model_dump(), overrides)
        return ActivityQuery.model_validate(merged)


class ActivityCriteria(DomainModel):
    """Exact-match criteria used to look up or delete activities.

    Only fields that are set take part in the match.
    """

    id: Optional[int] = None
    user_id: Optional[int] = None
    action: Optional[str] = None
    content: Optional[str] = None
    component: Optional[str] = None
    type: Optional[str] = None
    primary_link: Optional[str] = None
    item_id: Optional[int] = None
    secondary_item_id: Optional[int] = None
    date_recorded: Optional[datetime] = None
    hide_sitewide: Optional[bool] = None

    def as_dict(self) -> dict[str, Any]:
        """Return the criteria that were actually given."""
        return self.model_dump(exclude_none=True)

    def is_empty(self) -> bool:
        return not self.as_dict()
