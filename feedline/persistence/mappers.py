"""Mappers for converting between database rows and domain models.

Since we're using Pydantic domain models (immutable), we use manual mapping
instead of SQLAlchemy's classical imperative mapping.
"""

from typing import Any, Dict

from feedline.domain.model import Activity, User
from feedline.domain.value import ActivityId, UserId

# Written only by the tree rebuilder
BOUNDARY_FIELDS = {"mptt_left", "mptt_right"}


def row_to_activity(row: Dict[str, Any]) -> Activity:
    """Convert database row to Activity domain model.

    Args:
        row: Database row as dict

    Returns:
        Activity domain model
    """
    return Activity(
        id=ActivityId(int(row["id"])),
        user_id=UserId(int(row["user_id"])),
        component=row["component"],
        type=row["type"],
        action=row.get("action") or "",
        content=row.get("content") or "",
        primary_link=row.get("primary_link") or "",
        item_id=int(row["item_id"] or 0),
        secondary_item_id=int(row["secondary_item_id"] or 0),
        date_recorded=row["date_recorded"],
        hide_sitewide=bool(row["hide_sitewide"]),
        is_spam=bool(row["is_spam"]),
        mptt_left=int(row["mptt_left"] or 0),
        mptt_right=int(row["mptt_right"] or 0),
    )


def activity_to_dict(activity: Activity) -> Dict[str, Any]:
    """Convert Activity domain model to database dict.

    The id and the nested-set boundaries are left out; the store assigns the
    id and boundaries are owned by the tree rebuilder.

    Args:
        activity: Activity domain model

    Returns:
        Dict suitable for database insertion/update
    """
    fields = set(Activity.model_fields) - {"id"} - BOUNDARY_FIELDS
    return activity.model_dump(include=fields)


def row_to_user(row: Dict[str, Any]) -> User:
    """Convert database row to User domain model.

    Args:
        row: Database row as dict

    Returns:
        User domain model
    """
    return User(
        id=UserId(int(row["id"])),
        login=row["login"],
        nicename=row["nicename"],
        email=row.get("email"),
        display_name=row.get("display_name"),
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert User domain model to database dict.

    Args:
        user: User domain model

    Returns:
        Dict suitable for database insertion/update
    """
    return user.model_dump()
