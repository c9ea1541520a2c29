"""Access decision entities.

Value objects produced by the engine: the cached permission grant of a
(user, organization) pair, diagnostic decisions, visibility rules and the
list-query scopes derived from them.
"""

from dataclasses import dataclass
from typing import FrozenSet, Optional

from ....config.constants import DenialReason, MembershipStatus
from .permission import PermissionCode
from .role import Role


@dataclass(frozen=True)
class PermissionGrant:
    """Resolved authorization state of a user within one organization.

    ``membership_status`` is None when no membership exists. ``permissions``
    is empty unless the membership is active.
    """

    user_id: str
    organization_id: str
    membership_status: Optional[MembershipStatus]
    role: Optional[Role]
    permissions: FrozenSet[str]

    @classmethod
    def no_membership(cls, user_id: str, organization_id: str) -> "PermissionGrant":
        return cls(
            user_id=user_id,
            organization_id=organization_id,
            membership_status=None,
            role=None,
            permissions=frozenset(),
        )

    @property
    def is_member(self) -> bool:
        return self.membership_status is not None

    @property
    def is_active(self) -> bool:
        return self.membership_status is MembershipStatus.ACTIVE

    def grants(self, code: str) -> bool:
        return str(code) in self.permissions


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a diagnostic permission check."""

    allowed: bool
    permission: str
    reason: Optional[DenialReason] = None

    @classmethod
    def allow(cls, permission: str) -> "AccessDecision":
        return cls(allowed=True, permission=permission)

    @classmethod
    def deny(cls, permission: str, reason: DenialReason) -> "AccessDecision":
        return cls(allowed=False, permission=permission, reason=reason)

    @property
    def missing_permission(self) -> Optional[str]:
        """The lacking code, set only for MISSING_PERMISSION denials."""
        if self.reason is DenialReason.MISSING_PERMISSION:
            return self.permission
        return None

    @property
    def message(self) -> str:
        """Human-readable explanation suitable for a 403 response body."""
        if self.allowed:
            return "Access granted"
        if self.reason is DenialReason.NOT_A_MEMBER:
            return "User is not a member of this organization"
        if self.reason is DenialReason.SUSPENDED:
            return "User membership is suspended"
        if self.reason is DenialReason.PENDING_INVITATION:
            return "User has not accepted the invitation"
        return f"User does not have the required permission: {self.permission}"

    def __bool__(self) -> bool:
        return self.allowed


@dataclass(frozen=True)
class ResourceVisibilityRule:
    """Permissions gating one resource type.

    Holders of ``read_permission`` see records they own; holders of
    ``elevated_permission`` as well see every record of the organization.
    """

    resource_type: str
    read_permission: PermissionCode
    elevated_permission: PermissionCode


@dataclass(frozen=True)
class VisibilityScope:
    """Filter a caller applies when listing records of a resource type.

    When ``owner_user_id`` is set, only records assigned to or created by
    that user are visible.
    """

    resource_type: str
    organization_id: str
    owner_user_id: Optional[str] = None

    @property
    def is_organization_wide(self) -> bool:
        return self.owner_user_id is None


@dataclass(frozen=True)
class PermissionContext:
    """Full permission picture of a member, regardless of membership status.

    ``role_permissions`` lists what the role carries (registry-filtered);
    it is not what the member may currently do unless ``is_active``.
    ``role`` is None for a membership without a role, e.g. a pending
    invitation; ``role_permissions`` is then empty.
    """

    user_id: str
    organization_id: str
    role: Optional[Role]
    membership_status: MembershipStatus
    role_permissions: FrozenSet[str]

    @property
    def is_active(self) -> bool:
        return self.membership_status is MembershipStatus.ACTIVE

    @property
    def effective_permissions(self) -> FrozenSet[str]:
        return self.role_permissions if self.is_active else frozenset()
