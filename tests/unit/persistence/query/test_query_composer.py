"""Unit tests for SqlQueryComposer."""

import pytest

from feedline.domain.query import ActivityQuery
from feedline.domain.service import (
    MutedUsersPolicy,
    ScopeRegistry,
    ScopeResolution,
    default_scope_registry,
)
from feedline.persistence.query.composer import SqlQueryComposer
from feedline.persistence.repository import SqlActivityRepository


@pytest.fixture
def composer():
    return SqlQueryComposer(default_scope_registry())


@pytest.fixture
def describer():
    """Repository used only to render statements; never executes."""
    return SqlActivityRepository(session=None)


class TestFragments:
    """Tests for which fragments are produced, and in which order."""

    def test_default_query(self, composer):
        """A bare query filters spam, hidden rows, comments and last_activity."""
        # Act
        composed = composer.compose(ActivityQuery())

        # Assert
        assert composed.fragment_names == ["spam", "hidden", "excluded_types"]
        assert composed.excludes_last_activity is True
        assert composed.joins == ()

    def test_fragment_order(self, composer):
        """Fragments follow a fixed order regardless of how the query was built."""
        # Arrange
        query = ActivityQuery(
            date_query={"after": "2024-01-01"},
            meta_query=[{"key": "mood", "value": "happy"}],
            in_ids="1,2,3",
            exclude="4",
            search_terms="hello",
            user_id__in="1,2",
            filter={"action": "activity_update"},
            filter_query={"column": "component", "value": "groups"},
        )

        # Act
        composed = composer.compose(query)

        # Assert
        assert composed.fragment_names == [
            "filter_query",
            "filter",
            "user_ids",
            "spam",
            "search",
            "hidden",
            "exclude",
            "in",
            "meta",
            "date",
            "excluded_types",
        ]
        assert len(composed.joins) == 1

    def test_spam_all_and_show_hidden_drop_fragments(self, composer):
        """Permissive settings add no constraints."""
        # Act
        composed = composer.compose(
            ActivityQuery(spam="all", show_hidden=True, display_comments="stream")
        )

        # Assert
        assert composed.fragment_names == ["excluded_types"]

    def test_object_filter_keeps_last_activity(self, composer):
        """Filtering by component lets last_activity rows through."""
        # Act
        composed = composer.compose(
            ActivityQuery(filter={"object": "members"}, display_comments="stream")
        )

        # Assert
        assert "excluded_types" not in composed.fragment_names
        assert composed.excludes_last_activity is False

    def test_malformed_trees_produce_no_fragment(self, composer):
        """Trees without a valid clause are ignored."""
        # Arrange
        query = ActivityQuery(
            filter_query={"relation": "OR", "clauses": [{"column": "nope"}]},
            meta_query={"relation": "AND", "clauses": "not a list"},
            date_query={"after": "not a date"},
        )

        # Act
        composed = composer.compose(query)

        # Assert
        assert not {"filter_query", "meta", "date"} & set(composed.fragment_names)

    def test_visibility_policy_adds_to_hidden(self):
        """The visibility policy constrains listings even with show_hidden."""
        # Arrange
        composer = SqlQueryComposer(
            default_scope_registry(), visibility_policy=MutedUsersPolicy({3})
        )

        # Act
        composed = composer.compose(ActivityQuery(show_hidden=True))

        # Assert
        assert "hidden" in composed.fragment_names


class TestScopes:
    """Tests for named scopes."""

    def test_just_me_replaces_user_filter(self, composer):
        """just-me adds a scope clause and clears the user filter."""
        # Act
        composed = composer.compose(
            ActivityQuery(scope="just-me", filter={"user_id": "7"})
        )

        # Assert
        assert composed.fragment_names[0] == "scope_query"
        assert "filter" not in composed.fragment_names
        assert composed.query.filter.user_id == []

    def test_scope_disables_filter_query(self, composer):
        """filter_query is ignored once a scope is requested."""
        # Act
        composed = composer.compose(
            ActivityQuery(
                scope="just-me",
                user_id=7,
                filter_query={"column": "component", "value": "groups"},
            )
        )

        # Assert
        assert "filter_query" not in composed.fragment_names

    def test_unknown_scope_is_ignored(self, composer):
        """Scopes nobody registered contribute nothing."""
        # Act
        composed = composer.compose(ActivityQuery(scope="friends"))

        # Assert
        assert "scope_query" not in composed.fragment_names

    def test_multiple_scopes_are_combined(self):
        """Scope clauses are ORed and their overrides merged."""
        # Arrange
        registry = ScopeRegistry(
            {
                "groups": lambda query: ScopeResolution(
                    clauses={"column": "component", "value": "groups"},
                    overrides={"show_hidden": True},
                ),
                "blogs": lambda query: ScopeResolution(
                    clauses={"column": "component", "value": "blogs"},
                    overrides={"filter": {"action": ["new_post"]}},
                ),
            }
        )
        composer = SqlQueryComposer(registry)

        # Act
        composed = composer.compose(ActivityQuery(scope="groups,blogs"))

        # Assert
        assert composed.query.show_hidden is True
        assert composed.query.filter.action == ["new_post"]
        assert composed.fragment_names[:2] == ["scope_query", "filter"]
        assert " OR " in str(composed.where[0][1])


class TestDeterminism:
    """Tests for stable statement text."""

    def test_equivalent_queries_render_identically(self, composer, describer):
        """Equal queries produce the same statement text."""
        # Arrange
        first = ActivityQuery(in_ids="3,1,2", filter={"object": "groups"})
        second = ActivityQuery(in_ids=[3, 1, 2], filter={"object": ["groups"]})

        # Act
        first_text = describer.describe_ids_query(composer.compose(first), 26, 0)
        second_text = describer.describe_ids_query(composer.compose(second), 26, 0)

        # Assert
        assert first_text == second_text

    def test_different_pages_render_differently(self, composer, describer):
        """Offsets are part of the statement text."""
        # Arrange
        composed = composer.compose(ActivityQuery())

        # Act
        page_one = describer.describe_ids_query(composed, 26, 0)
        page_two = describer.describe_ids_query(composed, 26, 25)

        # Assert
        assert page_one != page_two

    def test_ids_and_count_render_differently(self, composer, describer):
        """Counts and pages never share a cache key."""
        # Arrange
        composed = composer.compose(ActivityQuery())

        # Act
        ids_text = describer.describe_ids_query(composed)
        count_text = describer.describe_count_query(composed)

        # Assert
        assert ids_text != count_text
