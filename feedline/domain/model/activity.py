"""Activity entity.

Activities are rows of an append-only log. Top-level activities may carry
threaded comments, which are activities themselves (type
``activity_comment``). A comment points at the top-level activity through
``item_id`` and at its direct parent through ``secondary_item_id``; the
``mptt_left``/``mptt_right`` boundaries number the thread as a nested set.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from feedline.domain.model.common import DomainModel
from feedline.domain.value import COMMENT_TYPE, ActivityId, UserId


class Activity(DomainModel):
    """Activity entity.

    ``id`` stays None until the store assigns one on first insert.
    Nested-set boundaries default to 0 and are only ever written by the
    tree rebuilder.
    """

    id: Optional[ActivityId] = None
    user_id: UserId = UserId(0)
    component: str = ""
    type: str = ""
    action: str = ""
    content: str = ""
    primary_link: str = ""
    item_id: int = 0
    secondary_item_id: int = 0
    date_recorded: datetime = Field(default_factory=datetime.now)
    hide_sitewide: bool = False
    is_spam: bool = False
    mptt_left: int = Field(default=0, ge=0)
    mptt_right: int = Field(default=0, ge=0)

    @property
    def is_comment(self) -> bool:
        """Whether this activity is part of a comment thread."""
        return self.type == COMMENT_TYPE
