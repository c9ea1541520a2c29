"""Permission services package.

Resolution, checking, visibility and membership services, plus the engine
facade wiring them together.
"""

from .permission_resolver import PermissionResolver
from .access_checker import AccessChecker
from .visibility_guard import DEFAULT_VISIBILITY_RULES, ResourceVisibilityGuard
from .membership_service import MembershipService
from .authorization_engine import AuthorizationEngine, create_authorization_engine

__all__ = [
    "PermissionResolver",
    "AccessChecker",
    "DEFAULT_VISIBILITY_RULES",
    "ResourceVisibilityGuard",
    "MembershipService",
    "AuthorizationEngine",
    "create_authorization_engine",
]
