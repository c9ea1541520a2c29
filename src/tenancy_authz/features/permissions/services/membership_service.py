"""Membership service.

Organization-membership queries that read the store directly. Membership
rows are not permission sets, so these answers are not cached; ``is_admin``
is the exception and goes through the permission cache.
"""

import logging
from typing import List, Optional

from ....config.constants import MembershipStatus
from ....config.settings import AuthzSettings, get_settings
from ....core.exceptions import AuthzError, StoreUnavailableError
from ..entities import (
    MembershipStore,
    MembershipSummary,
    PermissionCode,
    PermissionContext,
    Role,
)
from ..registry import PermissionRegistry
from .access_checker import AccessChecker
from .permission_resolver import PermissionResolver

logger = logging.getLogger(__name__)


class MembershipService:
    """Queries about a user's organizations and roles."""

    def __init__(
        self,
        store: MembershipStore,
        resolver: PermissionResolver,
        checker: AccessChecker,
        registry: PermissionRegistry,
        settings: Optional[AuthzSettings] = None,
    ):
        self.store = store
        self.resolver = resolver
        self.checker = checker
        self.registry = registry
        self.settings = settings or get_settings()

    async def get_permission_context(
        self, user_id: str, organization_id: str
    ) -> Optional[PermissionContext]:
        """
        Get the full permission picture of a member, whatever their status.

        Returns:
            None when the user has no membership in the organization; a
            membership without a role yields a context whose ``role`` is None
        """
        membership = await self.resolver.load_membership(user_id, organization_id)
        if membership is None:
            return None

        status = self.resolver.validate_membership(membership, user_id, organization_id)
        role = membership.role
        role_permissions = (
            self.registry.filter_valid(role.permission_codes) if role is not None else frozenset()
        )
        return PermissionContext(
            user_id=user_id,
            organization_id=organization_id,
            role=role,
            membership_status=status,
            role_permissions=role_permissions,
        )

    async def is_organization_member(self, user_id: str, organization_id: str) -> bool:
        """True only for an active membership."""
        membership = await self.resolver.load_membership(user_id, organization_id)
        if membership is None:
            return False
        status = self.resolver.validate_membership(membership, user_id, organization_id)
        return status is MembershipStatus.ACTIVE

    async def get_user_role(self, user_id: str, organization_id: str) -> Optional[Role]:
        """Get the role of a membership in any status."""
        membership = await self.resolver.load_membership(user_id, organization_id)
        return membership.role if membership is not None else None

    async def has_role(self, user_id: str, organization_id: str, role_name: str) -> bool:
        role = await self.get_user_role(user_id, organization_id)
        return role is not None and role.name == role_name

    async def is_admin(self, user_id: str, organization_id: str) -> bool:
        """Admins are members holding the user-management permission."""
        return await self.checker.has_permission(user_id, organization_id, PermissionCode.ADMIN_USERS)

    async def is_super_admin(self, user_id: str, organization_id: str) -> bool:
        return await self.has_role(user_id, organization_id, self.settings.super_admin_role_name)

    async def list_user_organizations(self, user_id: str) -> List[MembershipSummary]:
        """List the organizations the user is an active member of."""
        try:
            return list(await self.store.list_active_memberships(user_id))
        except AuthzError:
            raise
        except Exception as e:
            logger.error(f"Failed to list memberships for user {user_id}: {e}")
            raise StoreUnavailableError(
                f"Failed to list memberships: {e}",
                operation="list_active_memberships",
                details={"user_id": user_id},
            ) from e

    async def get_default_organization(self, user_id: str) -> Optional[MembershipSummary]:
        """
        Get the organization a user lands in by default: the earliest joined.

        Memberships without a join date sort last; ties keep store order.
        """
        memberships = await self.list_user_organizations(user_id)
        if not memberships:
            return None
        dated = [m for m in memberships if m.joined_at is not None]
        if not dated:
            return memberships[0]
        return min(dated, key=lambda m: m.joined_at)
