"""Strongly typed identifiers for feedline domain entities.

Using NewType for strong typing prevents mixing up different entity IDs
and makes the code more self-documenting. Activity ids are assigned by the
store as auto-incrementing integers.
"""

from typing import NewType

# Core domain entity identifiers
ActivityId = NewType("ActivityId", int)
UserId = NewType("UserId", int)
