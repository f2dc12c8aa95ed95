"""Domain layer DI providers."""

from dishka import Scope, provide

from feedline.config import ActivitySettings
from feedline.domain.repository import (
    ActivityCache,
    ActivityRepository,
    ProfileRepository,
    QueryComposer,
    UserRepository,
)
from feedline.domain.service import (
    ActionStringRegistry,
    ActivityService,
    CommentTreeService,
    Materializer,
    PaginationService,
    ScopeRegistry,
    TreeRebuilder,
    VisibilityPolicy,
    default_action_registry,
    default_scope_registry,
)
from feedline.persistence.query.composer import SqlQueryComposer
from feedline.util.di.base import ProviderBase


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Registries and the composer are stateless and live for the whole app.
    Services are REQUEST-scoped to align with repository/session lifecycle.
    """

    scope = Scope.REQUEST

    @provide(scope=Scope.APP)
    def get_scope_registry(self) -> ScopeRegistry:
        """Provide the registry of named listing scopes."""
        return default_scope_registry()

    @provide(scope=Scope.APP)
    def get_action_registry(self) -> ActionStringRegistry:
        """Provide the action string generators."""
        return default_action_registry()

    @provide(scope=Scope.APP)
    def get_visibility_policy(self) -> VisibilityPolicy:
        """Provide the visibility policy (everything visible)."""
        return VisibilityPolicy()

    @provide(scope=Scope.APP)
    def get_query_composer(
        self, scope_registry: ScopeRegistry, visibility_policy: VisibilityPolicy
    ) -> QueryComposer:
        """Provide the SQL query composer."""
        return SqlQueryComposer(
            scope_registry=scope_registry, visibility_policy=visibility_policy
        )

    @provide
    def get_pagination_service(
        self,
        activity_repository: ActivityRepository,
        query_composer: QueryComposer,
        cache: ActivityCache,
    ) -> PaginationService:
        """Provide id paging and counting."""
        return PaginationService(
            activity_repository=activity_repository,
            query_composer=query_composer,
            cache=cache,
        )

    @provide
    def get_materializer(
        self,
        activity_repository: ActivityRepository,
        user_repository: UserRepository,
        profile_repository: ProfileRepository,
        cache: ActivityCache,
        action_registry: ActionStringRegistry,
        visibility_policy: VisibilityPolicy,
        settings: ActivitySettings,
    ) -> Materializer:
        """Provide the materializer.

        Full names are only looked up when the profile subsystem is enabled.
        """
        return Materializer(
            activity_repository=activity_repository,
            user_repository=user_repository,
            cache=cache,
            action_registry=action_registry,
            profile_repository=(
                profile_repository if settings.profile_names_enabled else None
            ),
            visibility_policy=visibility_policy,
        )

    @provide
    def get_comment_tree_service(
        self,
        activity_repository: ActivityRepository,
        materializer: Materializer,
        cache: ActivityCache,
    ) -> CommentTreeService:
        """Provide comment tree service."""
        return CommentTreeService(
            activity_repository=activity_repository,
            materializer=materializer,
            cache=cache,
        )

    @provide
    def get_tree_rebuilder(
        self, activity_repository: ActivityRepository
    ) -> TreeRebuilder:
        """Provide nested-set rebuilder."""
        return TreeRebuilder(activity_repository=activity_repository)

    @provide
    def get_activity_service(
        self,
        activity_repository: ActivityRepository,
        pagination_service: PaginationService,
        materializer: Materializer,
        comment_tree_service: CommentTreeService,
        tree_rebuilder: TreeRebuilder,
        cache: ActivityCache,
        settings: ActivitySettings,
    ) -> ActivityService:
        """Provide activity domain service."""
        return ActivityService(
            activity_repository=activity_repository,
            pagination_service=pagination_service,
            materializer=materializer,
            comment_tree_service=comment_tree_service,
            tree_rebuilder=tree_rebuilder,
            cache=cache,
            settings=settings,
        )
