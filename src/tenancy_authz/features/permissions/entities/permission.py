"""Permission domain entities for the tenancy-authz permissions feature.

PermissionCode is the closed set of capabilities the system grants. Codes
follow the ``<category>:<action>`` structure; the admin family nests one
more segment (``admin:users:create``).
"""

from dataclasses import dataclass
from enum import Enum


class PermissionCode(str, Enum):
    """Every permission code recognized by the system."""

    # Customer Permissions
    CUSTOMERS_READ = "customers:read"
    CUSTOMERS_CREATE = "customers:create"
    CUSTOMERS_UPDATE = "customers:update"
    CUSTOMERS_DELETE = "customers:delete"
    CUSTOMERS_ASSIGN = "customers:assign"
    CUSTOMERS_EXPORT = "customers:export"

    # Deal Permissions
    DEALS_READ = "deals:read"
    DEALS_CREATE = "deals:create"
    DEALS_UPDATE = "deals:update"
    DEALS_DELETE = "deals:delete"
    DEALS_ASSIGN = "deals:assign"

    # Contact Permissions
    CONTACTS_READ = "contacts:read"
    CONTACTS_CREATE = "contacts:create"
    CONTACTS_UPDATE = "contacts:update"
    CONTACTS_DELETE = "contacts:delete"

    # Document Permissions
    DOCUMENTS_READ = "documents:read"
    DOCUMENTS_CREATE = "documents:create"
    DOCUMENTS_UPDATE = "documents:update"
    DOCUMENTS_DELETE = "documents:delete"
    DOCUMENTS_ANALYZE = "documents:analyze"

    # Project Permissions
    PROJECTS_READ = "projects:read"
    PROJECTS_WRITE = "projects:write"

    # Task Permissions
    TASKS_READ = "tasks:read"
    TASKS_WRITE = "tasks:write"
    TASKS_ASSIGN = "tasks:assign"
    TASKS_MANAGE = "tasks:manage"

    # Report Permissions
    REPORTS_VIEW = "reports:view"
    REPORTS_EXPORT = "reports:export"
    REPORTS_ADVANCED = "reports:advanced"

    # Admin Permissions
    ADMIN_USERS = "admin:users"
    ADMIN_USERS_CREATE = "admin:users:create"
    ADMIN_USERS_UPDATE = "admin:users:update"
    ADMIN_USERS_DELETE = "admin:users:delete"
    ADMIN_USERS_SUSPEND = "admin:users:suspend"
    ADMIN_ROLES = "admin:roles"
    ADMIN_ROLES_CREATE = "admin:roles:create"
    ADMIN_ROLES_UPDATE = "admin:roles:update"
    ADMIN_ROLES_DELETE = "admin:roles:delete"
    ADMIN_AUDIT = "admin:audit"
    ADMIN_AUDIT_EXPORT = "admin:audit:export"
    ADMIN_SETTINGS = "admin:settings"
    ADMIN_ORG = "admin:organization"

    # AI Permissions
    AI_USE = "ai:use"
    AI_CONFIGURE = "ai:configure"

    @property
    def category(self) -> str:
        """Category part of the code (the segment before the first colon)."""
        return self.value.split(":", 1)[0]

    @property
    def action(self) -> str:
        """Action part of the code (everything after the first colon)."""
        return self.value.split(":", 1)[1]

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PermissionDefinition:
    """Catalog metadata for a permission code, used for seeding and UI grouping."""

    code: PermissionCode
    name: str
    category: str
    description: str

    def __post_init__(self):
        if self.code.category != self.category:
            raise ValueError(
                f"Permission category mismatch: code={self.code.value}, category={self.category}"
            )


@dataclass(frozen=True)
class PermissionCategory:
    """A permission category with its display name and sort order."""

    key: str
    name: str
    order: int
