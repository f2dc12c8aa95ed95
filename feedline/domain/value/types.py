"""Domain value objects for the activity stream.

Value objects are immutable and defined by their values, not identity.
"""

from enum import Enum

# Type of the rows that make up comment threads
COMMENT_TYPE = "activity_comment"

# Bookkeeping rows that record a user's last visit
LAST_ACTIVITY_TYPE = "last_activity"

# Plain status updates
UPDATE_TYPE = "activity_update"

# Tombstone stored in place of an empty comment tree
NO_COMMENTS = "none"

# Columns that may be used for ordering and in filter trees
ACTIVITY_COLUMNS = (
    "id",
    "user_id",
    "component",
    "type",
    "action",
    "content",
    "primary_link",
    "item_id",
    "secondary_item_id",
    "date_recorded",
    "hide_sitewide",
    "mptt_left",
    "mptt_right",
    "is_spam",
)


class SpamPolicy(str, Enum):
    """Which rows a query returns with respect to the spam flag."""

    HAM_ONLY = "ham_only"
    SPAM_ONLY = "spam_only"
    ALL = "all"


class SortDirection(str, Enum):
    """Sort direction of a listing."""

    ASC = "ASC"
    DESC = "DESC"


class DisplayComments(str, Enum):
    """How comments are returned alongside a listing.

    - none: comments are excluded from the listing
    - threaded: comments are excluded, trees are attached to their parents
    - stream: comments appear in the listing as ordinary rows
    """

    NONE = "none"
    THREADED = "threaded"
    STREAM = "stream"


class ErrorType(str, Enum):
    """How ``save`` reports a validation failure."""

    BOOL = "bool"
    ERROR = "error"


class CacheGroup(str, Enum):
    """Cache namespaces used by the engine."""

    ACTIVITY = "activity"
    ACTIVITY_WITH_LAST_ACTIVITY = "activity_with_last_activity"
    ACTIVITY_COMMENTS = "activity_comments"
    ACTIVITY_ITEM = "activity_item"
