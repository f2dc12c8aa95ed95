"""Read-side activity models.

ActivityItem is what listings hand back to callers: the stored activity
enriched with author details and a generated action string. CommentNode
wraps an item inside a comment forest.
"""

from typing import Optional

from pydantic import Field

from feedline.domain.model.activity import Activity
from feedline.domain.model.common import DomainModel


class ActivityItem(Activity):
    """Activity enriched for display."""

    user_email: Optional[str] = None
    user_nicename: Optional[str] = None
    user_login: Optional[str] = None
    display_name: Optional[str] = None
    user_fullname: Optional[str] = None
    children: Optional[list["CommentNode"]] = None


class CommentNode(DomainModel):
    """A comment in a thread.

    Depth is the distance from the top-level activity (direct replies have
    depth 1). Children keep creation order.
    """

    item: ActivityItem
    depth: int = Field(ge=1)
    children: list["CommentNode"] = Field(default_factory=list)

    def walk(self):
        """Yield this node and all of its descendants depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()


ActivityItem.model_rebuild()
CommentNode.model_rebuild()
