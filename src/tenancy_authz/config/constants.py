"""Constants and enums for tenancy-authz.

This module defines the enums and fixed values used throughout the
authorization engine. The string values correspond to what the membership
store persists in its status and resource-type columns.
"""

from enum import Enum
from typing import Final


class MembershipStatus(str, Enum):
    """Organization membership status - corresponds to organization_members.status."""

    ACTIVE = "active"
    INVITED = "invited"
    SUSPENDED = "suspended"


class DenialReason(str, Enum):
    """Why a diagnostic permission check was denied.

    Declaration order is the order in which the checks run.
    """

    NOT_A_MEMBER = "not_a_member"
    SUSPENDED = "suspended"
    PENDING_INVITATION = "pending_invitation"
    MISSING_PERMISSION = "missing_permission"


class ResourceType(str, Enum):
    """Resource types guarded by ownership-based visibility rules."""

    CUSTOMER = "customer"
    DEAL = "deal"
    TASK = "task"


class SystemRoleNames:
    """Names of the built-in system roles."""

    SUPER_ADMIN: Final[str] = "Super Admin"
    ADMIN: Final[str] = "Admin"
    MANAGER: Final[str] = "Manager"
    SALES: Final[str] = "Sales"
    VIEWER: Final[str] = "Viewer"


class DatabaseSchemas:
    """Database schema names."""

    DEFAULT: Final[str] = "public"
