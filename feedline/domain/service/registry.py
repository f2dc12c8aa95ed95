"""Pluggable collaborators of the activity engine.

Scopes, action strings, prefetch hooks and the visibility predicate are
supplied from outside the engine. Each is an explicit registry or object
injected at construction time.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Optional

import logfire

from feedline.domain.model import ActivityItem
from feedline.domain.query import ActivityQuery
from feedline.domain.value import COMMENT_TYPE, UPDATE_TYPE


@dataclass(frozen=True)
class ScopeResolution:
    """What a named scope contributes to a query.

    Attributes:
        clauses: Filter tree restricting the listing (None for no clause)
        overrides: Query fields to deep-merge into the query
    """

    clauses: Any = None
    overrides: dict[str, Any] = field(default_factory=dict)


ScopeResolver = Callable[[ActivityQuery], Optional[ScopeResolution]]
ActionGenerator = Callable[[ActivityItem], Optional[str]]
PrefetchHook = Callable[[list[ActivityItem]], Awaitable[list[ActivityItem]]]


def _scope_user_id(query: ActivityQuery) -> Optional[int]:
    """User a scope applies to: the filtered user, else the query's user."""
    for value in query.filter.user_id:
        if isinstance(value, int):
            return value
    return query.user_id


def just_me_scope(query: ActivityQuery) -> Optional[ScopeResolution]:
    """Activity authored by the scoped user."""
    user_id = _scope_user_id(query)
    if not user_id:
        return None

    return ScopeResolution(
        clauses={
            "relation": "AND",
            "clauses": [{"column": "user_id", "value": user_id}],
        },
        # The scope already restricts authorship
        overrides={"filter": {"user_id": []}},
    )


class ScopeRegistry:
    """Maps scope names to resolvers."""

    def __init__(self, resolvers: Optional[dict[str, ScopeResolver]] = None) -> None:
        self._resolvers: dict[str, ScopeResolver] = dict(resolvers or {})

    def register(self, name: str, resolver: ScopeResolver) -> None:
        self._resolvers[name] = resolver

    def resolve(self, name: str, query: ActivityQuery) -> Optional[ScopeResolution]:
        """Resolve a scope for a query.

        Returns:
            The scope's contribution, or None for unknown or inapplicable scopes
        """
        resolver = self._resolvers.get(name)
        if resolver is None:
            logfire.debug("Unknown activity scope", scope=name)
            return None
        return resolver(query)


def default_scope_registry() -> ScopeRegistry:
    """Registry with the built-in scopes."""
    return ScopeRegistry({"just-me": just_me_scope})


def _author_name(item: ActivityItem) -> str:
    return item.display_name or item.user_login or f"User {item.user_id}"


def format_activity_update(item: ActivityItem) -> Optional[str]:
    return f"{_author_name(item)} posted an update"


def format_activity_comment(item: ActivityItem) -> Optional[str]:
    return f"{_author_name(item)} posted a new activity comment"


class ActionStringRegistry:
    """Generates display action strings per activity type.

    Types without a generator (or whose generator returns nothing) keep the
    stored literal action.
    """

    def __init__(
        self, generators: Optional[dict[str, ActionGenerator]] = None
    ) -> None:
        self._generators: dict[str, ActionGenerator] = dict(generators or {})

    def register(self, activity_type: str, generator: ActionGenerator) -> None:
        self._generators[activity_type] = generator

    def generate(self, item: ActivityItem) -> Optional[str]:
        generator = self._generators.get(item.type)
        if generator is None:
            return None
        return generator(item)


def default_action_registry() -> ActionStringRegistry:
    """Registry with generators for the built-in activity types."""
    return ActionStringRegistry(
        {
            UPDATE_TYPE: format_activity_update,
            COMMENT_TYPE: format_activity_comment,
        }
    )


class VisibilityPolicy:
    """Decides which activities a viewer may see.

    ``where_clause`` returns a filter tree (the same format as
    ``ActivityQuery.filter_query``) that is added to every listing, or None.
    ``allows`` is applied to materialized items for rules that cannot be
    expressed as a filter tree. The base policy allows everything.
    """

    def where_clause(self, query: ActivityQuery) -> Any:
        return None

    def allows(self, item: ActivityItem) -> bool:
        return True


class MutedUsersPolicy(VisibilityPolicy):
    """Hides activity authored by a set of muted users."""

    def __init__(self, muted_user_ids: set[int]) -> None:
        self.muted_user_ids = set(muted_user_ids)

    def where_clause(self, query: ActivityQuery) -> Any:
        if not self.muted_user_ids:
            return None
        return {
            "column": "user_id",
            "compare": "NOT IN",
            "value": sorted(self.muted_user_ids),
        }

    def allows(self, item: ActivityItem) -> bool:
        return item.user_id not in self.muted_user_ids
