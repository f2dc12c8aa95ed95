"""Domain value objects for feedline."""

from feedline.domain.value.identifiers import ActivityId, UserId
from feedline.domain.value.types import (
    ACTIVITY_COLUMNS,
    COMMENT_TYPE,
    LAST_ACTIVITY_TYPE,
    NO_COMMENTS,
    UPDATE_TYPE,
    CacheGroup,
    DisplayComments,
    ErrorType,
    SortDirection,
    SpamPolicy,
)

__all__ = [
    # Identifiers
    "ActivityId",
    "UserId",
    # Constants
    "ACTIVITY_COLUMNS",
    "COMMENT_TYPE",
    "LAST_ACTIVITY_TYPE",
    "NO_COMMENTS",
    "UPDATE_TYPE",
    # Types
    "CacheGroup",
    "DisplayComments",
    "ErrorType",
    "SortDirection",
    "SpamPolicy",
]
