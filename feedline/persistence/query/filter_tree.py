"""Advanced filter trees.

A tree is either a group::

    {"relation": "OR", "clauses": [<node>, <node>, ...]}

(a bare list is a group with relation AND) or a leaf clause::

    {"column": "type", "compare": "IN", "value": ["activity_update"]}

Columns must be activity columns. ``compare`` defaults to ``IN`` for list
values and ``=`` otherwise. Anything malformed compiles to nothing.
"""

from typing import Any, Optional

from sqlalchemy import String, and_, not_, or_
from sqlalchemy.sql.elements import ColumnElement

from feedline.domain.value import ACTIVITY_COLUMNS
from feedline.persistence.query.filters import coerce_value, coerce_values
from feedline.persistence.tables import activity_table

COMPARES = (
    "=",
    "!=",
    ">",
    ">=",
    "<",
    "<=",
    "IN",
    "NOT IN",
    "LIKE",
    "NOT LIKE",
    "BETWEEN",
    "NOT BETWEEN",
)


def combine(relation: Any, clauses: list[ColumnElement]) -> Optional[ColumnElement]:
    """Join compiled clauses with AND or OR, skipping the wrapper for one."""
    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    if str(relation or "AND").upper() == "OR":
        return or_(*clauses)
    return and_(*clauses)


def compile_filter_tree(tree: Any) -> Optional[ColumnElement]:
    """Compile a filter tree into a WHERE clause.

    Args:
        tree: Group, bare list or leaf clause

    Returns:
        The clause, or None if nothing valid was found
    """
    if isinstance(tree, list):
        relation, children = "AND", tree
    elif isinstance(tree, dict):
        if "column" in tree:
            return compile_clause(tree)
        relation, children = tree.get("relation", "AND"), tree.get("clauses")
        if not isinstance(children, list):
            return None
    else:
        return None

    compiled = [compile_filter_tree(child) for child in children]
    return combine(relation, [clause for clause in compiled if clause is not None])


def compile_clause(clause: dict[str, Any]) -> Optional[ColumnElement]:
    """Compile one leaf clause, None if it is malformed."""
    column_name = clause.get("column")
    if column_name not in ACTIVITY_COLUMNS:
        return None
    column = activity_table.c[column_name]

    value = clause.get("value")
    if value is None:
        return None

    compare = clause.get("compare")
    if compare is None:
        compare = "IN" if isinstance(value, (list, tuple)) else "="
    compare = str(compare).upper()
    if compare not in COMPARES:
        return None

    try:
        if compare in ("IN", "NOT IN"):
            values = coerce_values(column, value)
            if not values:
                return None
            return column.in_(values) if compare == "IN" else column.not_in(values)

        if compare in ("BETWEEN", "NOT BETWEEN"):
            values = coerce_values(column, value)
            if len(values) != 2:
                return None
            between = column.between(values[0], values[1])
            return between if compare == "BETWEEN" else not_(between)

        if compare in ("LIKE", "NOT LIKE"):
            if not isinstance(column.type, String):
                return None
            like = column.contains(str(value), autoescape=True)
            return like if compare == "LIKE" else not_(like)

        if isinstance(value, (list, tuple)):
            return None
        scalar = coerce_value(column, value)
    except (TypeError, ValueError):
        return None

    if compare == "=":
        return column == scalar
    if compare == "!=":
        return column != scalar
    if compare == ">":
        return column > scalar
    if compare == ">=":
        return column >= scalar
    if compare == "<":
        return column < scalar
    return column <= scalar
