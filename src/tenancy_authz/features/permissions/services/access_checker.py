"""Access checker.

Boolean and diagnostic permission queries. Every query reads through the
permission cache; the checker never talks to the store itself.
"""

import logging
from typing import Callable, FrozenSet, List, Optional, Sequence, Set

from ....config.constants import DenialReason, MembershipStatus
from ....config.settings import AuthzSettings, get_settings
from ..cache.permission_cache import PermissionCache
from ..entities import AccessDecision, PermissionGrant
from ..registry import PermissionRegistry

logger = logging.getLogger(__name__)

# Ordered guard chain for diagnostic checks; the first guard returning a
# reason wins.
Guard = Callable[[PermissionGrant, str], Optional[DenialReason]]


def _not_a_member(grant: PermissionGrant, code: str) -> Optional[DenialReason]:
    return DenialReason.NOT_A_MEMBER if not grant.is_member else None


def _suspended(grant: PermissionGrant, code: str) -> Optional[DenialReason]:
    if grant.membership_status is MembershipStatus.SUSPENDED:
        return DenialReason.SUSPENDED
    return None


def _pending_invitation(grant: PermissionGrant, code: str) -> Optional[DenialReason]:
    if grant.membership_status is MembershipStatus.INVITED:
        return DenialReason.PENDING_INVITATION
    return None


def _missing_permission(grant: PermissionGrant, code: str) -> Optional[DenialReason]:
    return DenialReason.MISSING_PERMISSION if not grant.grants(code) else None


DIAGNOSTIC_GUARDS: List[Guard] = [
    _not_a_member,
    _suspended,
    _pending_invitation,
    _missing_permission,
]


class AccessChecker:
    """Answers "may this user do X in this organization" from cached grants."""

    def __init__(
        self,
        cache: PermissionCache,
        registry: PermissionRegistry,
        settings: Optional[AuthzSettings] = None,
    ):
        self.cache = cache
        self.registry = registry
        self.settings = settings or get_settings()
        # Unknown codes already warned about
        self._warned_codes: Set[str] = set()

    async def get_user_permissions(self, user_id: str, organization_id: str) -> FrozenSet[str]:
        """Get every permission code the user currently holds in the organization."""
        return await self.cache.get_or_resolve(user_id, organization_id)

    async def has_permission(self, user_id: str, organization_id: str, code: str) -> bool:
        """Check a single permission."""
        code = self._normalize(code)
        permissions = await self.cache.get_or_resolve(user_id, organization_id)
        return code in permissions

    async def has_any_permission(
        self, user_id: str, organization_id: str, codes: Sequence[str]
    ) -> bool:
        """Check that at least one of the permissions is held. False for an empty list."""
        if not codes:
            return False
        normalized = [self._normalize(code) for code in codes]
        permissions = await self.cache.get_or_resolve(user_id, organization_id)
        return any(code in permissions for code in normalized)

    async def has_all_permissions(
        self, user_id: str, organization_id: str, codes: Sequence[str]
    ) -> bool:
        """Check that every permission is held. True for an empty list."""
        if not codes:
            return True
        normalized = [self._normalize(code) for code in codes]
        permissions = await self.cache.get_or_resolve(user_id, organization_id)
        return all(code in permissions for code in normalized)

    async def check_permission(self, user_id: str, organization_id: str, code: str) -> AccessDecision:
        """
        Check a permission and explain a denial.

        Reasons are reported in a fixed order: not a member, suspended,
        pending invitation, missing permission.
        """
        code = self._normalize(code)
        grant = await self.cache.get_grant(user_id, organization_id)

        for guard in DIAGNOSTIC_GUARDS:
            reason = guard(grant, code)
            if reason is not None:
                self._log_denial(user_id, organization_id, code, reason)
                return AccessDecision.deny(code, reason)

        return AccessDecision.allow(code)

    def _normalize(self, code: str) -> str:
        code = str(code)
        if (
            self.settings.warn_on_unknown_permission
            and code not in self._warned_codes
            and not self.registry.is_valid(code)
        ):
            self._warned_codes.add(code)
            logger.warning(f"Permission check for unregistered code '{code}'; treating as not granted")
        return code

    def _log_denial(self, user_id: str, organization_id: str, code: str, reason: DenialReason) -> None:
        level = logging.INFO if self.settings.log_permission_denials else logging.DEBUG
        logger.log(
            level,
            f"Permission {code} denied for user {user_id} in organization "
            f"{organization_id}: {reason.value}",
        )
