"""Permission entities package.

Domain entities and protocols for permission resolution and access decisions.
"""

from .permission import PermissionCategory, PermissionCode, PermissionDefinition
from .role import DefaultRoleDefinition, Role
from .membership import Membership, MembershipSummary, ResourceOwnership
from .access import (
    AccessDecision,
    PermissionContext,
    PermissionGrant,
    ResourceVisibilityRule,
    VisibilityScope,
)
from .protocols import MembershipStore

__all__ = [
    # Permissions
    "PermissionCode",
    "PermissionDefinition",
    "PermissionCategory",

    # Roles
    "Role",
    "DefaultRoleDefinition",

    # Memberships
    "Membership",
    "MembershipSummary",
    "ResourceOwnership",

    # Decisions
    "AccessDecision",
    "PermissionContext",
    "PermissionGrant",
    "ResourceVisibilityRule",
    "VisibilityScope",

    # Protocols
    "MembershipStore",
]
