"""Domain services."""

from .activity_service import ActivityService
from .base import Service
from .comment_tree_service import CommentTreeService
from .materializer import Materializer
from .pagination_service import ActivityPage, PaginationService
from .registry import (
    ActionStringRegistry,
    MutedUsersPolicy,
    PrefetchHook,
    ScopeRegistry,
    ScopeResolution,
    VisibilityPolicy,
    default_action_registry,
    default_scope_registry,
)
from .tree_rebuilder import TreeRebuilder

__all__ = [
    "ActionStringRegistry",
    "ActivityPage",
    "ActivityService",
    "CommentTreeService",
    "Materializer",
    "MutedUsersPolicy",
    "PaginationService",
    "PrefetchHook",
    "ScopeRegistry",
    "ScopeResolution",
    "Service",
    "TreeRebuilder",
    "VisibilityPolicy",
    "default_action_registry",
    "default_scope_registry",
]
