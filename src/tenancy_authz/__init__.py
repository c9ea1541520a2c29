"""tenancy-authz - Multi-tenant authorization engine.

Resolves what a user may do inside an organization from their role, caches
the result per (user, organization), and combines permissions with record
ownership to decide which customers, deals and tasks a member may see.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import (
    AuthzSettings,
    get_settings,
    DenialReason,
    MembershipStatus,
    ResourceType,
    SystemRoleNames,
)

from .core.exceptions import (
    # Base Exception
    AuthzError,

    # Common Exceptions
    ConfigurationError,
    ValidationError,
    InvalidPermissionCodeError,
    UnknownResourceTypeError,
    InfrastructureError,
    StoreUnavailableError,

    # Utility Functions
    get_http_status_code,
    create_error_response,
)

from .features.permissions import (
    # Entities
    PermissionCode,
    Role,
    Membership,
    MembershipSummary,
    ResourceOwnership,
    AccessDecision,
    PermissionContext,
    ResourceVisibilityRule,
    VisibilityScope,
    MembershipStore,

    # Registry
    PermissionRegistry,
    get_permission_registry,

    # Engine
    AuthorizationEngine,
    create_authorization_engine,

    # Stores
    AsyncPGMembershipStore,
    InMemoryMembershipStore,
)

__all__ = [
    "__version__",

    # Configuration
    "AuthzSettings",
    "get_settings",
    "DenialReason",
    "MembershipStatus",
    "ResourceType",
    "SystemRoleNames",

    # Exceptions
    "AuthzError",
    "ConfigurationError",
    "ValidationError",
    "InvalidPermissionCodeError",
    "UnknownResourceTypeError",
    "InfrastructureError",
    "StoreUnavailableError",
    "get_http_status_code",
    "create_error_response",

    # Entities
    "PermissionCode",
    "Role",
    "Membership",
    "MembershipSummary",
    "ResourceOwnership",
    "AccessDecision",
    "PermissionContext",
    "ResourceVisibilityRule",
    "VisibilityScope",
    "MembershipStore",

    # Registry
    "PermissionRegistry",
    "get_permission_registry",

    # Engine
    "AuthorizationEngine",
    "create_authorization_engine",

    # Stores
    "AsyncPGMembershipStore",
    "InMemoryMembershipStore",
]
