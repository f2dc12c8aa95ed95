"""SQL query composer.

Turns an ActivityQuery into the ordered WHERE fragments and joins of a
listing. Each concern contributes at most one named fragment; the store
AND-joins them in the order they were produced.
"""

from typing import Any, Optional

import logfire
from sqlalchemy.sql.elements import ColumnElement

from feedline.domain.query import ActivityQuery, ComposedQuery, deep_merge
from feedline.domain.repository import QueryComposer
from feedline.domain.service.registry import ScopeRegistry, VisibilityPolicy
from feedline.domain.value import (
    COMMENT_TYPE,
    LAST_ACTIVITY_TYPE,
    DisplayComments,
    SpamPolicy,
)
from feedline.persistence.query.date import compile_date_query
from feedline.persistence.query.filter_tree import combine, compile_filter_tree
from feedline.persistence.query.filters import filter_clause
from feedline.persistence.query.meta import compile_meta_query
from feedline.persistence.tables import activity_table


class SqlQueryComposer(QueryComposer):
    """Composes listing queries against the activity table."""

    def __init__(
        self,
        scope_registry: ScopeRegistry,
        visibility_policy: Optional[VisibilityPolicy] = None,
    ):
        self.scope_registry = scope_registry
        self.visibility_policy = visibility_policy

    def compose(self, query: ActivityQuery) -> ComposedQuery:
        where: list[tuple[str, ColumnElement]] = []

        def add(name: str, clause: Optional[ColumnElement]) -> None:
            if clause is not None:
                where.append((name, clause))

        table = activity_table

        # Scopes may rewrite the query, so they go first
        scope_clause, query = self._scope(query)
        add("scope_query", scope_clause)

        if not query.scope:
            add("filter_query", compile_filter_tree(query.filter_query))

        add("filter", filter_clause(query.filter))

        user_clauses = []
        if query.user_id__in:
            user_clauses.append(table.c.user_id.in_(query.user_id__in))
        if query.user_id__not_in:
            user_clauses.append(table.c.user_id.not_in(query.user_id__not_in))
        add("user_ids", combine("AND", user_clauses))

        if query.spam == SpamPolicy.HAM_ONLY:
            add("spam", table.c.is_spam.is_(False))
        elif query.spam == SpamPolicy.SPAM_ONLY:
            add("spam", table.c.is_spam.is_(True))

        if query.search_terms:
            add(
                "search",
                table.c.content.icontains(query.search_terms, autoescape=True),
            )

        hidden_clauses = []
        if not query.show_hidden:
            hidden_clauses.append(table.c.hide_sitewide.is_(False))
        if self.visibility_policy is not None:
            tree = self.visibility_policy.where_clause(query)
            visibility = compile_filter_tree(tree)
            if visibility is not None:
                hidden_clauses.append(visibility)
        add("hidden", combine("AND", hidden_clauses))

        if query.exclude:
            add("exclude", table.c.id.not_in(query.exclude))
        if query.in_ids:
            add("in", table.c.id.in_(query.in_ids))

        meta = compile_meta_query(query.meta_query)
        add("meta", meta.where)

        add("date", compile_date_query(query.date_query))

        excluded_types = []
        if query.display_comments in (DisplayComments.NONE, DisplayComments.THREADED):
            excluded_types.append(COMMENT_TYPE)
        if not query.filter.object:
            excluded_types.append(LAST_ACTIVITY_TYPE)
        if excluded_types:
            add("excluded_types", table.c.type.not_in(excluded_types))

        return ComposedQuery(
            query=query,
            where=tuple(where),
            joins=tuple(meta.joins),
            excludes_last_activity=LAST_ACTIVITY_TYPE in excluded_types,
        )

    def _scope(
        self, query: ActivityQuery
    ) -> tuple[Optional[ColumnElement], ActivityQuery]:
        """Resolve requested scopes.

        Returns:
            OR of the scope trees (None if no scope applied) and the query
            with every scope's overrides merged in
        """
        if not query.scope:
            return None, query

        trees: list[Any] = []
        overrides: dict[str, Any] = {}
        for name in query.scope:
            resolution = self.scope_registry.resolve(name, query)
            if resolution is None:
                continue
            if resolution.clauses:
                trees.append(resolution.clauses)
            overrides = deep_merge(overrides, resolution.overrides)

        if trees:
            logfire.debug(
                "Resolved activity scopes", scopes=query.scope, count=len(trees)
            )

        clause = compile_filter_tree({"relation": "OR", "clauses": trees})
        return clause, query.with_overrides(overrides)
