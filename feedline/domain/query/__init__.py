"""Listing query and composition types."""

from feedline.domain.query.composed import ComposedQuery
from feedline.domain.query.listing import (
    ActivityCriteria,
    ActivityFilter,
    ActivityQuery,
    deep_merge,
    parse_id_list,
    parse_list,
)

__all__ = [
    "ActivityCriteria",
    "ActivityFilter",
    "ActivityQuery",
    "ComposedQuery",
    "deep_merge",
    "parse_id_list",
    "parse_list",
]
