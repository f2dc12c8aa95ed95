"""Unit tests for filter, meta and date tree compilation."""

from datetime import datetime

import pytest

from feedline.persistence.query.date import build_bound, compile_date_query
from feedline.persistence.query.filter_tree import compile_filter_tree
from feedline.persistence.query.meta import compile_meta_query


class TestFilterTree:
    """Tests for advanced filter trees."""

    @pytest.mark.parametrize(
        "tree",
        [
            None,
            "type = 'x'",
            [],
            {"relation": "AND"},
            {"column": "password", "value": "x"},
            {"column": "type"},
            {"column": "type", "compare": "REGEXP", "value": "x"},
            {"column": "id", "compare": "BETWEEN", "value": [1]},
            {"column": "id", "compare": "=", "value": [1, 2]},
            {"column": "id", "compare": "LIKE", "value": "1"},
            {"column": "id", "value": "abc"},
        ],
    )
    def test_malformed_trees_compile_to_nothing(self, tree):
        """Anything that isn't a usable clause is dropped."""
        assert compile_filter_tree(tree) is None

    def test_single_clause_is_not_wrapped(self):
        """A group with one valid child compiles to that child."""
        # Act
        clause = compile_filter_tree(
            {
                "relation": "OR",
                "clauses": [
                    {"column": "type", "value": "activity_update"},
                    {"column": "bogus", "value": 1},
                ],
            }
        )

        # Assert
        assert str(clause) == "activity.type = :type_1"

    def test_list_value_defaults_to_in(self):
        """List values compare with IN unless told otherwise."""
        # Act
        clause = compile_filter_tree({"column": "user_id", "value": [1, 2]})

        # Assert
        assert "IN" in str(clause)

    def test_nested_groups(self):
        """Groups nest with their own relations."""
        # Act
        clause = compile_filter_tree(
            [
                {"column": "component", "value": "groups"},
                {
                    "relation": "OR",
                    "clauses": [
                        {"column": "user_id", "value": 1},
                        {"column": "user_id", "value": 2},
                    ],
                },
            ]
        )

        # Assert
        text = str(clause)
        assert " AND " in text
        assert " OR " in text


class TestMetaQuery:
    """Tests for meta sub-queries."""

    def test_each_clause_gets_an_alias(self):
        """Joins are aliased mt1, mt2, ... in clause order."""
        # Act
        meta = compile_meta_query(
            [
                {"key": "mood", "value": "happy"},
                {"key": "score", "value": 3, "compare": ">", "type": "NUMERIC"},
            ]
        )

        # Assert
        assert [join.alias.name for join in meta.joins] == ["mt1", "mt2"]
        assert meta.where is not None

    def test_invalid_clauses_add_no_join(self):
        """Rejected clauses don't leave joins behind."""
        # Act
        meta = compile_meta_query(
            [
                {"key": "mood", "compare": "SOUNDS LIKE", "value": "x"},
                {"key": "score", "value": "high", "type": "NUMERIC"},
                {"compare": "EXISTS"},
                {"key": "mood", "value": "happy"},
            ]
        )

        # Assert
        assert [join.alias.name for join in meta.joins] == ["mt1"]

    @pytest.mark.parametrize("meta_query", [None, [], {}, {"clauses": 3}])
    def test_empty_meta_query(self, meta_query):
        """Empty or malformed meta queries compile to nothing."""
        # Act
        meta = compile_meta_query(meta_query)

        # Assert
        assert meta.joins == []
        assert meta.where is None


class TestBuildBound:
    """Tests for date bound construction."""

    def test_year_only_upper_default(self):
        """Missing parts widen to the end of the period."""
        assert build_bound({"year": 2023}, default_to_max=True) == datetime(
            2023, 12, 31, 23, 59, 59
        )

    def test_year_only_lower_default(self):
        """Missing parts narrow to the start of the period."""
        assert build_bound({"year": 2023}, default_to_max=False) == datetime(
            2023, 1, 1, 0, 0, 0
        )

    def test_month_end_respects_leap_years(self):
        """The last day of a month depends on the year."""
        assert build_bound({"year": 2024, "month": 2}, default_to_max=True) == (
            datetime(2024, 2, 29, 23, 59, 59)
        )

    def test_string_bound(self):
        """Strings are parsed as timestamps."""
        assert build_bound("2024-03-01 10:30:00", default_to_max=True) == datetime(
            2024, 3, 1, 10, 30
        )

    @pytest.mark.parametrize(
        "value", [{"month": 3}, {"year": 2024, "month": 13}, "yesterday"]
    )
    def test_unusable_bound(self, value):
        """Bounds that can't be built are None."""
        assert build_bound(value, default_to_max=False) is None


class TestDateQuery:
    """Tests for date query compilation."""

    @pytest.mark.parametrize(
        "date_query",
        [None, [], {"relation": "OR"}, {"after": "soon"}, {"year": "this one"}],
    )
    def test_nothing_applies(self, date_query):
        """Queries without a usable clause compile to nothing."""
        assert compile_date_query(date_query) is None

    def test_inclusive_changes_operator(self):
        """Inclusive bounds compare with >= and <=."""
        # Act
        exclusive = compile_date_query({"after": "2024-01-01"})
        inclusive = compile_date_query({"after": "2024-01-01", "inclusive": True})

        # Assert
        assert ">" in str(exclusive) and ">=" not in str(exclusive)
        assert ">=" in str(inclusive)

    def test_groups_pass_inclusive_down(self):
        """A group's inclusive flag applies to its clauses."""
        # Act
        clause = compile_date_query(
            {
                "relation": "AND",
                "inclusive": True,
                "clauses": [{"before": "2024-06-01"}],
            }
        )

        # Assert
        assert "<=" in str(clause)
