"""Authorization engine facade.

Wires the registry, resolver, cache, checker, visibility guard and
membership service over one membership store and exposes their operations
as a single object. Build it with ``create_authorization_engine``.
"""

import logging
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence

from ....config.settings import AuthzSettings, get_settings
from ....core.exceptions import ConfigurationError
from ..cache.permission_cache import PermissionCache
from ..entities import (
    AccessDecision,
    MembershipStore,
    MembershipSummary,
    PermissionContext,
    ResourceVisibilityRule,
    Role,
    VisibilityScope,
)
from ..registry import PermissionRegistry, get_permission_registry
from .access_checker import AccessChecker
from .membership_service import MembershipService
from .permission_resolver import PermissionResolver
from .visibility_guard import ResourceVisibilityGuard

logger = logging.getLogger(__name__)


class AuthorizationEngine:
    """Single entry point for permission and visibility decisions.

    One engine belongs to one event loop. Call ``invalidate`` (or
    ``invalidate_organization`` after editing a role) whenever memberships
    or role permissions change.
    """

    def __init__(
        self,
        store: MembershipStore,
        registry: PermissionRegistry,
        settings: AuthzSettings,
        rules: Optional[Iterable[ResourceVisibilityRule]] = None,
    ):
        self.store = store
        self.registry = registry
        self.settings = settings
        self.resolver = PermissionResolver(store, registry)
        self.cache = PermissionCache(self.resolver)
        self.checker = AccessChecker(self.cache, registry, settings)
        self.guard = ResourceVisibilityGuard(store, self.checker, rules)
        self.memberships = MembershipService(
            store, self.resolver, self.checker, registry, settings
        )

    # Permission queries

    async def get_user_permissions(self, user_id: str, organization_id: str) -> FrozenSet[str]:
        return await self.checker.get_user_permissions(user_id, organization_id)

    async def has_permission(self, user_id: str, organization_id: str, code: str) -> bool:
        return await self.checker.has_permission(user_id, organization_id, code)

    async def has_any_permission(self, user_id: str, organization_id: str, codes: Sequence[str]) -> bool:
        return await self.checker.has_any_permission(user_id, organization_id, codes)

    async def has_all_permissions(self, user_id: str, organization_id: str, codes: Sequence[str]) -> bool:
        return await self.checker.has_all_permissions(user_id, organization_id, codes)

    async def check_permission(self, user_id: str, organization_id: str, code: str) -> AccessDecision:
        return await self.checker.check_permission(user_id, organization_id, code)

    # Record visibility

    async def can_access(
        self, resource_type: str, user_id: str, organization_id: str, resource_id: str
    ) -> bool:
        return await self.guard.can_access(resource_type, user_id, organization_id, resource_id)

    async def can_access_customer(self, user_id: str, organization_id: str, customer_id: str) -> bool:
        return await self.guard.can_access("customer", user_id, organization_id, customer_id)

    async def can_access_deal(self, user_id: str, organization_id: str, deal_id: str) -> bool:
        return await self.guard.can_access("deal", user_id, organization_id, deal_id)

    async def visibility_scope(
        self, resource_type: str, user_id: str, organization_id: str
    ) -> Optional[VisibilityScope]:
        return await self.guard.visibility_scope(resource_type, user_id, organization_id)

    # Memberships

    async def get_permission_context(self, user_id: str, organization_id: str) -> Optional[PermissionContext]:
        return await self.memberships.get_permission_context(user_id, organization_id)

    async def is_organization_member(self, user_id: str, organization_id: str) -> bool:
        return await self.memberships.is_organization_member(user_id, organization_id)

    async def get_user_role(self, user_id: str, organization_id: str) -> Optional[Role]:
        return await self.memberships.get_user_role(user_id, organization_id)

    async def has_role(self, user_id: str, organization_id: str, role_name: str) -> bool:
        return await self.memberships.has_role(user_id, organization_id, role_name)

    async def is_admin(self, user_id: str, organization_id: str) -> bool:
        return await self.memberships.is_admin(user_id, organization_id)

    async def is_super_admin(self, user_id: str, organization_id: str) -> bool:
        return await self.memberships.is_super_admin(user_id, organization_id)

    async def list_user_organizations(self, user_id: str) -> List[MembershipSummary]:
        return await self.memberships.list_user_organizations(user_id)

    async def get_default_organization(self, user_id: str) -> Optional[MembershipSummary]:
        return await self.memberships.get_default_organization(user_id)

    # Invalidation

    async def invalidate(self, user_id: str, organization_id: Optional[str] = None) -> int:
        """Drop cached grants of a user, in one organization or all of them."""
        removed = await self.cache.invalidate(user_id, organization_id)
        logger.info(
            f"Invalidated {removed} cached grants for user {user_id}"
            + (f" in organization {organization_id}" if organization_id else "")
        )
        return removed

    async def invalidate_organization(self, organization_id: str) -> int:
        """Drop every cached grant of an organization."""
        removed = await self.cache.invalidate_organization(organization_id)
        logger.info(f"Invalidated {removed} cached grants in organization {organization_id}")
        return removed

    async def clear(self) -> int:
        return await self.cache.clear()

    def cache_stats(self) -> Dict[str, Any]:
        return self.cache.stats()


def create_authorization_engine(
    store: MembershipStore,
    settings: Optional[AuthzSettings] = None,
    rules: Optional[Iterable[ResourceVisibilityRule]] = None,
    registry: Optional[PermissionRegistry] = None,
) -> AuthorizationEngine:
    """
    Create an authorization engine over a membership store.

    Args:
        store: Membership store implementation
        settings: Engine settings; read from the environment when omitted
        rules: Visibility rules; customer, deal and task rules when omitted
        registry: Permission registry; the built-in catalog when omitted

    Raises:
        ConfigurationError: the store does not implement MembershipStore,
            or a rule references an unregistered permission
    """
    if not isinstance(store, MembershipStore):
        raise ConfigurationError(
            f"{type(store).__name__} does not implement the MembershipStore protocol"
        )

    registry = registry or get_permission_registry()
    settings = settings or get_settings()

    if rules is not None:
        rules = list(rules)
        unknown = [
            str(code)
            for rule in rules
            for code in (rule.read_permission, rule.elevated_permission)
            if not registry.is_valid(code)
        ]
        if unknown:
            raise ConfigurationError(
                f"Visibility rules reference unregistered permissions: {', '.join(sorted(unknown))}",
                details={"codes": sorted(unknown)},
            )

    return AuthorizationEngine(store, registry, settings, rules)
