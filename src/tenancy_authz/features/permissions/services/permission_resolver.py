"""Permission resolver.

Turns a (user, organization) pair into the set of permission codes the user
currently holds there. The resolver is a pure read over the membership
store; caching is the job of PermissionCache.
"""

import logging
from typing import FrozenSet, Optional

from ....config.constants import MembershipStatus
from ....core.exceptions import AuthzError, StoreUnavailableError
from ..entities import Membership, MembershipStore, PermissionGrant
from ..registry import PermissionRegistry

logger = logging.getLogger(__name__)


class PermissionResolver:
    """Resolves role assignments into registry-filtered permission sets."""

    def __init__(self, store: MembershipStore, registry: PermissionRegistry):
        self.store = store
        self.registry = registry

    async def resolve(self, user_id: str, organization_id: str) -> FrozenSet[str]:
        """Get the permission codes a user holds in an organization."""
        grant = await self.resolve_grant(user_id, organization_id)
        return grant.permissions

    async def resolve_grant(self, user_id: str, organization_id: str) -> PermissionGrant:
        """
        Resolve the full grant of a user in an organization.

        A missing or non-active membership yields an empty permission set;
        that is an ordinary answer, not an error.

        Raises:
            StoreUnavailableError: the store failed or returned a malformed membership
        """
        membership = await self.load_membership(user_id, organization_id)
        if membership is None:
            return PermissionGrant.no_membership(user_id, organization_id)

        status = self.validate_membership(membership, user_id, organization_id)

        if status is not MembershipStatus.ACTIVE:
            permissions: FrozenSet[str] = frozenset()
        else:
            permissions = self.registry.filter_valid(membership.role.permission_codes)
            dropped = len(membership.role.permission_codes) - len(permissions)
            if dropped:
                logger.debug(
                    f"Dropped {dropped} unregistered permission codes from role "
                    f"{membership.role.id} for user {user_id}"
                )

        return PermissionGrant(
            user_id=user_id,
            organization_id=organization_id,
            membership_status=status,
            role=membership.role,
            permissions=permissions,
        )

    async def load_membership(self, user_id: str, organization_id: str) -> Optional[Membership]:
        """Read a raw membership, mapping store failures to StoreUnavailableError."""
        try:
            return await self.store.get_membership(user_id, organization_id)
        except AuthzError:
            raise
        except Exception as e:
            logger.error(
                f"Membership store failed for user {user_id} in organization {organization_id}: {e}"
            )
            raise StoreUnavailableError(
                f"Failed to load membership: {e}",
                operation="get_membership",
                details={"user_id": user_id, "organization_id": organization_id},
            ) from e

    @staticmethod
    def validate_membership(
        membership: Membership, user_id: str, organization_id: str
    ) -> MembershipStatus:
        """Reject rows a well-formed store never returns."""
        try:
            status = MembershipStatus(membership.status)
        except ValueError as e:
            raise StoreUnavailableError(
                f"Malformed membership status: {membership.status!r}",
                operation="get_membership",
                details={"user_id": user_id, "organization_id": organization_id},
            ) from e

        if status is MembershipStatus.ACTIVE and membership.role is None:
            raise StoreUnavailableError(
                "Active membership has no role",
                operation="get_membership",
                details={"user_id": user_id, "organization_id": organization_id},
            )
        return status
