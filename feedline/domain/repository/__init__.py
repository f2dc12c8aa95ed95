"""Repository interfaces for the feedline domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the infrastructure layer.
"""

from feedline.domain.repository.activity import ActivityRepository
from feedline.domain.repository.cache import ActivityCache
from feedline.domain.repository.profile import ProfileRepository
from feedline.domain.repository.query import QueryComposer
from feedline.domain.repository.user import UserRepository

__all__ = [
    "ActivityCache",
    "ActivityRepository",
    "ProfileRepository",
    "QueryComposer",
    "UserRepository",
]
