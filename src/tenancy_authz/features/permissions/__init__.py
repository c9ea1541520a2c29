"""Permissions feature for tenancy-authz.

Feature-First architecture for multi-tenant authorization:
- entities/: Permission codes, roles, memberships, decisions and protocols
- registry: The closed permission catalog and default roles
- cache/: Single-flight permission grant cache
- services/: Resolution, checks, visibility guards and the engine facade
- repositories/: Membership store implementations
- dependencies: FastAPI integration
"""

# Core permission entities and protocols
from .entities import (
    PermissionCode, PermissionDefinition, PermissionCategory,
    Role, DefaultRoleDefinition,
    Membership, MembershipSummary, ResourceOwnership,
    AccessDecision, PermissionContext, PermissionGrant,
    ResourceVisibilityRule, VisibilityScope,
    MembershipStore,
)

# Permission catalog
from .registry import (
    PERMISSION_DEFINITIONS,
    PERMISSION_CATEGORIES,
    DEFAULT_ROLES,
    PermissionRegistry,
    get_permission_registry,
)

# Cache and services
from .cache import PermissionCache
from .services import (
    PermissionResolver,
    AccessChecker,
    DEFAULT_VISIBILITY_RULES,
    ResourceVisibilityGuard,
    MembershipService,
    AuthorizationEngine,
    create_authorization_engine,
)

# Concrete store implementations
from .repositories import AsyncPGMembershipStore, InMemoryMembershipStore

# FastAPI integration
from .dependencies import AccessPrincipal, AuthorizationDependencies, AuthorizationDependencyError

__all__ = [
    # Entities
    "PermissionCode",
    "PermissionDefinition",
    "PermissionCategory",
    "Role",
    "DefaultRoleDefinition",
    "Membership",
    "MembershipSummary",
    "ResourceOwnership",
    "AccessDecision",
    "PermissionContext",
    "PermissionGrant",
    "ResourceVisibilityRule",
    "VisibilityScope",

    # Protocols
    "MembershipStore",

    # Registry
    "PERMISSION_DEFINITIONS",
    "PERMISSION_CATEGORIES",
    "DEFAULT_ROLES",
    "PermissionRegistry",
    "get_permission_registry",

    # Cache and services
    "PermissionCache",
    "PermissionResolver",
    "AccessChecker",
    "DEFAULT_VISIBILITY_RULES",
    "ResourceVisibilityGuard",
    "MembershipService",
    "AuthorizationEngine",
    "create_authorization_engine",

    # Store implementations
    "AsyncPGMembershipStore",
    "InMemoryMembershipStore",

    # FastAPI
    "AccessPrincipal",
    "AuthorizationDependencies",
    "AuthorizationDependencyError",
]
