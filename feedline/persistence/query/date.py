"""Date sub-queries on ``date_recorded``.

A leaf clause may combine range bounds and calendar parts::

    {"after": "2024-01-01", "before": {"year": 2024, "month": 6},
     "inclusive": True}
    {"year": 2024, "month": [1, 2, 3], "compare": "IN"}

Groups use ``relation`` + ``clauses`` (or a bare list). Dict bounds with
missing parts are widened or narrowed depending on the bound and on
``inclusive``: ``after {"year": 2023}`` means after the end of 2023, while
an inclusive ``after`` starts at the beginning of 2023.
"""

import calendar
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import and_, extract, not_
from sqlalchemy.sql.elements import ColumnElement

from feedline.persistence.query.filter_tree import combine
from feedline.persistence.query.filters import parse_datetime
from feedline.persistence.tables import activity_table

DATE_PARTS = ("year", "month", "day", "hour", "minute", "second")
PART_COMPARES = (
    "=",
    "!=",
    ">",
    ">=",
    "<",
    "<=",
    "IN",
    "NOT IN",
    "BETWEEN",
    "NOT BETWEEN",
)
_LEAF_KEYS = ("after", "before", *DATE_PARTS)


def build_bound(value: Any, default_to_max: bool) -> Optional[datetime]:
    """Turn a bound (string, datetime or dict of parts) into a datetime.

    Args:
        value: The bound
        default_to_max: Fill missing dict parts with their largest value

    Returns:
        The bound, or None if it can't be parsed
    """
    if isinstance(value, dict):
        try:
            year = int(value["year"])
            month = int(value.get("month") or (12 if default_to_max else 1))
            last_day = calendar.monthrange(year, month)[1]
            day = int(value.get("day") or (last_day if default_to_max else 1))
            hour = int(value.get("hour", 23 if default_to_max else 0))
            minute = int(value.get("minute", 59 if default_to_max else 0))
            second = int(value.get("second", 59 if default_to_max else 0))
            return datetime(year, month, day, hour, minute, second)
        except (KeyError, TypeError, ValueError):
            return None
    try:
        return parse_datetime(value)
    except (TypeError, ValueError):
        return None


def _part_clause(part: str, value: Any, compare: str) -> Optional[ColumnElement]:
    expr = extract(part, activity_table.c.date_recorded)
    try:
        if isinstance(value, str) and "," in value:
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            values = [int(v) for v in value]
        else:
            values = [int(value)]
    except (TypeError, ValueError):
        return None

    if compare in ("IN", "NOT IN"):
        return expr.in_(values) if compare == "IN" else expr.not_in(values)
    if compare in ("BETWEEN", "NOT BETWEEN"):
        if len(values) != 2:
            return None
        between = expr.between(values[0], values[1])
        return between if compare == "BETWEEN" else not_(between)
    if len(values) != 1:
        return None

    scalar = values[0]
    if compare == "=":
        return expr == scalar
    if compare == "!=":
        return expr != scalar
    if compare == ">":
        return expr > scalar
    if compare == ">=":
        return expr >= scalar
    if compare == "<":
        return expr < scalar
    return expr <= scalar


def compile_date_clause(
    clause: dict[str, Any], inclusive_default: bool = False
) -> Optional[ColumnElement]:
    """Compile one leaf clause, None if nothing in it applies."""
    column = activity_table.c.date_recorded
    inclusive = bool(clause.get("inclusive", inclusive_default))
    compare = str(clause.get("compare", "=")).upper()
    if compare not in PART_COMPARES:
        compare = "="

    parts: list[ColumnElement] = []

    if clause.get("after") is not None:
        after = build_bound(clause["after"], default_to_max=not inclusive)
        if after is not None:
            parts.append(column >= after if inclusive else column > after)

    if clause.get("before") is not None:
        before = build_bound(clause["before"], default_to_max=inclusive)
        if before is not None:
            parts.append(column <= before if inclusive else column < before)

    for part in DATE_PARTS:
        if clause.get(part) is None:
            continue
        compiled = _part_clause(part, clause[part], compare)
        if compiled is not None:
            parts.append(compiled)

    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]
    return and_(*parts)


def compile_date_query(
    date_query: Any, inclusive_default: bool = False
) -> Optional[ColumnElement]:
    """Compile a date query tree.

    Args:
        date_query: Leaf clause, group or bare list
        inclusive_default: Inclusive setting inherited from the parent group

    Returns:
        WHERE clause, or None if nothing applies
    """
    if isinstance(date_query, list):
        relation, children = "AND", date_query
    elif isinstance(date_query, dict):
        if any(key in date_query for key in _LEAF_KEYS):
            return compile_date_clause(date_query, inclusive_default)
        relation, children = date_query.get("relation", "AND"), date_query.get(
            "clauses"
        )
        inclusive_default = bool(date_query.get("inclusive", inclusive_default))
        if not isinstance(children, list):
            return None
    else:
        return None

    compiled = [compile_date_query(child, inclusive_default) for child in children]
    return combine(relation, [clause for clause in compiled if clause is not None])
