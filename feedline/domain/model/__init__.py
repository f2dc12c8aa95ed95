"""Domain model entities for feedline."""

from feedline.domain.model.activity import Activity
from feedline.domain.model.item import ActivityItem, CommentNode
from feedline.domain.model.listing import ActivityListing
from feedline.domain.model.user import User

__all__ = [
    "Activity",
    "ActivityItem",
    "ActivityListing",
    "CommentNode",
    "User",
]
