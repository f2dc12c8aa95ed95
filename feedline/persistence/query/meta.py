"""Meta sub-queries.

Filters activities by rows of ``activity_meta``. Each leaf clause gets its
own aliased LEFT OUTER JOIN (``mt1``, ``mt2``, ...) matching the clause's
key, and a WHERE predicate on that alias. Leaf format::

    {"key": "mood", "value": "happy", "compare": "=", "type": "CHAR"}

Groups use the same shape as filter trees (``relation`` + ``clauses``, or a
bare list).
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import Numeric, and_, cast, not_
from sqlalchemy.sql.elements import ColumnElement
from sqlalchemy.sql.selectable import Alias

from feedline.persistence.query.filter_tree import combine
from feedline.persistence.tables import activity_meta_table, activity_table

META_COMPARES = (
    "=",
    "!=",
    ">",
    ">=",
    "<",
    "<=",
    "LIKE",
    "NOT LIKE",
    "IN",
    "NOT IN",
    "BETWEEN",
    "NOT BETWEEN",
    "EXISTS",
    "NOT EXISTS",
)

NUMERIC_TYPES = ("NUMERIC", "DECIMAL", "SIGNED", "UNSIGNED")


@dataclass
class MetaJoin:
    """One aliased meta join."""

    alias: Alias
    onclause: ColumnElement


@dataclass
class MetaQuerySQL:
    """Compiled meta query."""

    joins: list[MetaJoin] = field(default_factory=list)
    where: Optional[ColumnElement] = None


class _MetaCompiler:
    def __init__(self) -> None:
        self.joins: list[MetaJoin] = []

    def compile(self, node: Any) -> Optional[ColumnElement]:
        if isinstance(node, list):
            relation, children = "AND", node
        elif isinstance(node, dict):
            if "key" in node or "value" in node:
                return self.compile_clause(node)
            relation, children = node.get("relation", "AND"), node.get("clauses")
            if not isinstance(children, list):
                return None
        else:
            return None

        compiled = [self.compile(child) for child in children]
        return combine(relation, [clause for clause in compiled if clause is not None])

    def compile_clause(self, clause: dict[str, Any]) -> Optional[ColumnElement]:
        key = clause.get("key")
        value = clause.get("value")

        compare = clause.get("compare")
        if compare is None:
            if value is None:
                compare = "EXISTS"
            else:
                compare = "IN" if isinstance(value, (list, tuple)) else "="
        compare = str(compare).upper()
        if compare not in META_COMPARES:
            return None
        if key is None and compare in ("EXISTS", "NOT EXISTS"):
            return None
        if value is None and compare not in ("EXISTS", "NOT EXISTS"):
            return None

        alias = activity_meta_table.alias(f"mt{len(self.joins) + 1}")
        onclause = alias.c.activity_id == activity_table.c.id
        if key is not None:
            onclause = and_(onclause, alias.c.meta_key == str(key))

        predicate = self._predicate(alias, compare, value, clause.get("type"))
        if predicate is None:
            return None

        self.joins.append(MetaJoin(alias=alias, onclause=onclause))
        return predicate

    @staticmethod
    def _predicate(
        alias: Alias, compare: str, value: Any, meta_type: Any
    ) -> Optional[ColumnElement]:
        if compare == "EXISTS":
            return alias.c.activity_id.is_not(None)
        if compare == "NOT EXISTS":
            return alias.c.activity_id.is_(None)

        numeric = str(meta_type or "").upper() in NUMERIC_TYPES
        column = cast(alias.c.meta_value, Numeric) if numeric else alias.c.meta_value

        def convert(raw: Any) -> Any:
            return float(raw) if numeric else str(raw)

        try:
            if compare in ("IN", "NOT IN", "BETWEEN", "NOT BETWEEN"):
                if isinstance(value, str):
                    value = [part.strip() for part in value.split(",")]
                values = [convert(v) for v in value]
                if not values:
                    return None
                if compare == "IN":
                    return column.in_(values)
                if compare == "NOT IN":
                    return column.not_in(values)
                if len(values) != 2:
                    return None
                between = column.between(values[0], values[1])
                return between if compare == "BETWEEN" else not_(between)

            if compare in ("LIKE", "NOT LIKE"):
                like = alias.c.meta_value.contains(str(value), autoescape=True)
                return like if compare == "LIKE" else not_(like)

            scalar = convert(value)
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


def compile_meta_query(meta_query: Any) -> MetaQuerySQL:
    """Compile a meta query into joins plus a WHERE clause.

    Args:
        meta_query: Meta query tree (None or empty for no constraint)

    Returns:
        Joins and WHERE clause; both empty when nothing applies
    """
    if not meta_query:
        return MetaQuerySQL()

    compiler = _MetaCompiler()
    where = compiler.compile(meta_query)
    if where is None:
        return MetaQuerySQL()
    return MetaQuerySQL(joins=compiler.joins, where=where)
