"""Column-level predicate helpers shared by the query composer."""

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Boolean, Column, DateTime, Integer, and_
from sqlalchemy.sql.elements import ColumnElement

from feedline.domain.query import ActivityFilter, parse_list
from feedline.persistence.tables import activity_table

_DATETIME_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")


def parse_datetime(value: Any) -> datetime:
    """Parse a timestamp given as datetime or string.

    Raises:
        ValueError: If the value is not a recognizable timestamp
    """
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return datetime.fromisoformat(text)


def coerce_value(column: Column, value: Any) -> Any:
    """Convert a raw filter value to the Python type of ``column``.

    Raises:
        ValueError: If the value doesn't fit the column
    """
    column_type = column.type
    if isinstance(column_type, Boolean):
        if isinstance(value, str):
            return value.strip().lower() not in ("", "0", "false")
        return bool(value)
    if isinstance(column_type, Integer):
        return int(value)
    if isinstance(column_type, DateTime):
        return parse_datetime(value)
    return str(value)


def coerce_values(column: Column, values: Any) -> list[Any]:
    """Coerce a list (or comma separated string) of values, dropping bad ones."""
    coerced = []
    for value in parse_list(values):
        try:
            coerced.append(coerce_value(column, value))
        except ValueError:
            continue
    return coerced


def in_operator(column: Column, values: Any) -> Optional[ColumnElement]:
    """``column IN (...)`` for a list or comma separated string.

    Numeric entries are bound as integers, anything else as strings. Returns
    None when no usable value is left.
    """
    coerced = coerce_values(column, values)
    if not coerced:
        return None
    return column.in_(coerced)


def filter_clause(activity_filter: ActivityFilter) -> Optional[ColumnElement]:
    """Compile the regular filter map.

    Returns:
        AND of all filter predicates, or None if none apply
    """
    table = activity_table
    clauses = [
        in_operator(table.c.user_id, activity_filter.user_id),
        in_operator(table.c.component, activity_filter.object),
        in_operator(table.c.type, activity_filter.action),
        in_operator(table.c.item_id, activity_filter.primary_id),
        in_operator(table.c.secondary_item_id, activity_filter.secondary_id),
    ]

    if activity_filter.offset:
        clauses.append(table.c.id >= abs(activity_filter.offset))

    if activity_filter.offset_lower:
        clauses.append(table.c.id <= abs(activity_filter.offset_lower))

    since = activity_filter.since_datetime
    if since is not None:
        clauses.append(table.c.date_recorded > since)

    clauses = [clause for clause in clauses if clause is not None]
    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    return and_(*clauses)
