"""Composed query."""

from dataclasses import dataclass
from typing import Any

from feedline.domain.query.listing import ActivityQuery


@dataclass(frozen=True)
class ComposedQuery:
    """Output of the query composer.

    Attributes:
        query: Effective query after scope overrides were merged in
        where: Ordered ``(name, clause)`` pairs, AND-joined by the store
        joins: Join targets required by the WHERE clauses
        excludes_last_activity: Whether ``last_activity`` rows are filtered
            out, which selects the long-lived listing cache group
    """

    query: ActivityQuery
    where: tuple[tuple[str, Any], ...] = ()
    joins: tuple[Any, ...] = ()
    excludes_last_activity: bool = False

    @property
    def fragment_names(self) -> list[str]:
        return [name for name, _ in self.where]

    def clauses(self) -> list[Any]:
        return [clause for _, clause in self.where]
