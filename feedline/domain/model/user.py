"""User entity.

The activity engine does not own users; this is the narrow read model the
user lookup collaborator returns for enriching listings.
"""

from typing import Optional

from feedline.domain.model.common import DomainModel
from feedline.domain.value import UserId


class User(DomainModel):
    """Author details attached to activity items."""

    id: UserId
    login: str
    nicename: str
    email: Optional[str] = None
    display_name: Optional[str] = None
