"""Permission registry for tenancy-authz.

The registry is the closed catalog of permission codes the system knows
about. Every permission set the engine produces is filtered through it, so a
role row carrying a stale or misspelled code never grants anything.

Also carries the catalog metadata used for seeding and UI grouping: display
names, categories with their sort order, and the built-in system roles.
"""

import logging
from functools import lru_cache
from typing import Dict, FrozenSet, Iterable, List, Optional

from ...core.exceptions import InvalidPermissionCodeError
from .entities import DefaultRoleDefinition, PermissionCategory, PermissionCode, PermissionDefinition

logger = logging.getLogger(__name__)

P = PermissionCode


PERMISSION_DEFINITIONS: List[PermissionDefinition] = [
    # Customer Permissions
    PermissionDefinition(P.CUSTOMERS_READ, "Read customers", "customers", "View the customer list and details"),
    PermissionDefinition(P.CUSTOMERS_CREATE, "Create customers", "customers", "Add new customer records"),
    PermissionDefinition(P.CUSTOMERS_UPDATE, "Update customers", "customers", "Edit customer records"),
    PermissionDefinition(P.CUSTOMERS_DELETE, "Delete customers", "customers", "Delete customers and their related data"),
    PermissionDefinition(P.CUSTOMERS_ASSIGN, "Assign customers", "customers", "Assign customers to other sales members"),
    PermissionDefinition(P.CUSTOMERS_EXPORT, "Export customers", "customers", "Export customer data"),

    # Deal Permissions
    PermissionDefinition(P.DEALS_READ, "Read deals", "deals", "View the deal list and details"),
    PermissionDefinition(P.DEALS_CREATE, "Create deals", "deals", "Add new deals"),
    PermissionDefinition(P.DEALS_UPDATE, "Update deals", "deals", "Edit deal data and stages"),
    PermissionDefinition(P.DEALS_DELETE, "Delete deals", "deals", "Delete deals"),
    PermissionDefinition(P.DEALS_ASSIGN, "Assign deals", "deals", "Assign deals to other sales members"),

    # Contact Permissions
    PermissionDefinition(P.CONTACTS_READ, "Read contacts", "contacts", "View the contact list and details"),
    PermissionDefinition(P.CONTACTS_CREATE, "Create contacts", "contacts", "Add new contacts"),
    PermissionDefinition(P.CONTACTS_UPDATE, "Update contacts", "contacts", "Edit contact data"),
    PermissionDefinition(P.CONTACTS_DELETE, "Delete contacts", "contacts", "Delete contacts"),

    # Document Permissions
    PermissionDefinition(P.DOCUMENTS_READ, "Read documents", "documents", "View the document list and content"),
    PermissionDefinition(P.DOCUMENTS_CREATE, "Upload documents", "documents", "Upload new documents"),
    PermissionDefinition(P.DOCUMENTS_UPDATE, "Update documents", "documents", "Edit document information"),
    PermissionDefinition(P.DOCUMENTS_DELETE, "Delete documents", "documents", "Delete documents"),
    PermissionDefinition(P.DOCUMENTS_ANALYZE, "Analyze documents", "documents", "Analyze document content with AI"),

    # Project Permissions
    PermissionDefinition(P.PROJECTS_READ, "View projects", "projects", "View the project list and details"),
    PermissionDefinition(P.PROJECTS_WRITE, "Edit projects", "projects", "Create, edit and delete projects"),

    # Task Permissions
    PermissionDefinition(P.TASKS_READ, "View tasks", "tasks", "View the task list and calendar"),
    PermissionDefinition(P.TASKS_WRITE, "Edit tasks", "tasks", "Create, edit and delete tasks"),
    PermissionDefinition(P.TASKS_ASSIGN, "Assign tasks", "tasks", "Assign tasks to other members"),
    PermissionDefinition(P.TASKS_MANAGE, "Manage all tasks", "tasks", "Manage the tasks of every member of the organization"),

    # Report Permissions
    PermissionDefinition(P.REPORTS_VIEW, "View reports", "reports", "View basic statistical reports"),
    PermissionDefinition(P.REPORTS_EXPORT, "Export reports", "reports", "Export report data"),
    PermissionDefinition(P.REPORTS_ADVANCED, "Advanced reports", "reports", "View advanced analytical reports"),

    # Admin Permissions
    PermissionDefinition(P.ADMIN_USERS, "User management", "admin", "Access user management"),
    PermissionDefinition(P.ADMIN_USERS_CREATE, "Create users", "admin", "Invite new users to join"),
    PermissionDefinition(P.ADMIN_USERS_UPDATE, "Update users", "admin", "Edit user data and roles"),
    PermissionDefinition(P.ADMIN_USERS_DELETE, "Delete users", "admin", "Remove users from the organization"),
    PermissionDefinition(P.ADMIN_USERS_SUSPEND, "Suspend users", "admin", "Suspend user accounts"),
    PermissionDefinition(P.ADMIN_ROLES, "Role management", "admin", "Access role management"),
    PermissionDefinition(P.ADMIN_ROLES_CREATE, "Create roles", "admin", "Create custom roles"),
    PermissionDefinition(P.ADMIN_ROLES_UPDATE, "Update roles", "admin", "Edit role permissions"),
    PermissionDefinition(P.ADMIN_ROLES_DELETE, "Delete roles", "admin", "Delete custom roles"),
    PermissionDefinition(P.ADMIN_AUDIT, "Audit log", "admin", "View the audit log"),
    PermissionDefinition(P.ADMIN_AUDIT_EXPORT, "Export audit log", "admin", "Export audit log reports"),
    PermissionDefinition(P.ADMIN_SETTINGS, "System settings", "admin", "Manage system settings"),
    PermissionDefinition(P.ADMIN_ORG, "Organization management", "admin", "Manage organization information"),

    # AI Permissions
    PermissionDefinition(P.AI_USE, "Use AI features", "ai", "Use the AI assistant, email drafts and sales insights"),
    PermissionDefinition(P.AI_CONFIGURE, "AI settings", "ai", "Manage AI provider settings and API keys"),
]


PERMISSION_CATEGORIES: List[PermissionCategory] = [
    PermissionCategory("customers", "Customer management", 1),
    PermissionCategory("deals", "Deal management", 2),
    PermissionCategory("contacts", "Contact management", 3),
    PermissionCategory("projects", "Project management", 4),
    PermissionCategory("tasks", "Task management", 5),
    PermissionCategory("documents", "Document management", 6),
    PermissionCategory("reports", "Reports and analytics", 7),
    PermissionCategory("admin", "System administration", 8),
    PermissionCategory("ai", "AI features", 9),
]


DEFAULT_ROLES: Dict[str, DefaultRoleDefinition] = {
    "SUPER_ADMIN": DefaultRoleDefinition(
        key="SUPER_ADMIN",
        name="Super Admin",
        description="System super administrator holding every permission",
        is_system=True,
        is_default=False,
        permissions=tuple(PermissionCode),
    ),
    "ADMIN": DefaultRoleDefinition(
        key="ADMIN",
        name="Admin",
        description="Organization administrator managing users and settings",
        is_system=True,
        is_default=False,
        permissions=(
            # All CRM permissions
            P.CUSTOMERS_READ, P.CUSTOMERS_CREATE, P.CUSTOMERS_UPDATE,
            P.CUSTOMERS_DELETE, P.CUSTOMERS_ASSIGN, P.CUSTOMERS_EXPORT,
            P.DEALS_READ, P.DEALS_CREATE, P.DEALS_UPDATE, P.DEALS_DELETE, P.DEALS_ASSIGN,
            P.CONTACTS_READ, P.CONTACTS_CREATE, P.CONTACTS_UPDATE, P.CONTACTS_DELETE,
            P.PROJECTS_READ, P.PROJECTS_WRITE,
            P.TASKS_READ, P.TASKS_WRITE, P.TASKS_ASSIGN, P.TASKS_MANAGE,
            P.DOCUMENTS_READ, P.DOCUMENTS_CREATE, P.DOCUMENTS_UPDATE,
            P.DOCUMENTS_DELETE, P.DOCUMENTS_ANALYZE,
            P.REPORTS_VIEW, P.REPORTS_EXPORT, P.REPORTS_ADVANCED,
            # Admin permissions, without the destructive ones
            P.ADMIN_USERS, P.ADMIN_USERS_CREATE, P.ADMIN_USERS_UPDATE, P.ADMIN_USERS_SUSPEND,
            P.ADMIN_ROLES, P.ADMIN_ROLES_CREATE, P.ADMIN_ROLES_UPDATE,
            P.ADMIN_AUDIT, P.ADMIN_SETTINGS, P.ADMIN_ORG,
            # AI permissions
            P.AI_USE, P.AI_CONFIGURE,
        ),
    ),
    "MANAGER": DefaultRoleDefinition(
        key="MANAGER",
        name="Manager",
        description="Team manager handling the customers and deals of the team",
        is_system=True,
        is_default=False,
        permissions=(
            P.CUSTOMERS_READ, P.CUSTOMERS_CREATE, P.CUSTOMERS_UPDATE,
            P.CUSTOMERS_DELETE, P.CUSTOMERS_ASSIGN, P.CUSTOMERS_EXPORT,
            P.DEALS_READ, P.DEALS_CREATE, P.DEALS_UPDATE, P.DEALS_DELETE, P.DEALS_ASSIGN,
            P.CONTACTS_READ, P.CONTACTS_CREATE, P.CONTACTS_UPDATE, P.CONTACTS_DELETE,
            P.PROJECTS_READ, P.PROJECTS_WRITE,
            P.TASKS_READ, P.TASKS_WRITE, P.TASKS_ASSIGN,
            P.DOCUMENTS_READ, P.DOCUMENTS_CREATE, P.DOCUMENTS_UPDATE,
            P.DOCUMENTS_DELETE, P.DOCUMENTS_ANALYZE,
            P.REPORTS_VIEW, P.REPORTS_EXPORT, P.REPORTS_ADVANCED,
            P.AI_USE,
        ),
    ),
    "SALES": DefaultRoleDefinition(
        key="SALES",
        name="Sales",
        description="Sales member handling their own customers and deals",
        is_system=True,
        is_default=True,
        permissions=(
            P.CUSTOMERS_READ, P.CUSTOMERS_CREATE, P.CUSTOMERS_UPDATE,
            P.DEALS_READ, P.DEALS_CREATE, P.DEALS_UPDATE,
            P.CONTACTS_READ, P.CONTACTS_CREATE, P.CONTACTS_UPDATE, P.CONTACTS_DELETE,
            P.PROJECTS_READ,
            P.TASKS_READ, P.TASKS_WRITE,
            P.DOCUMENTS_READ, P.DOCUMENTS_CREATE, P.DOCUMENTS_UPDATE, P.DOCUMENTS_ANALYZE,
            P.REPORTS_VIEW,
            P.AI_USE,
        ),
    ),
    "VIEWER": DefaultRoleDefinition(
        key="VIEWER",
        name="Viewer",
        description="Read-only access to organization data",
        is_system=True,
        is_default=False,
        permissions=(
            P.CUSTOMERS_READ, P.DEALS_READ, P.CONTACTS_READ, P.PROJECTS_READ,
            P.TASKS_READ, P.DOCUMENTS_READ, P.REPORTS_VIEW,
        ),
    ),
}


class PermissionRegistry:
    """
    Closed catalog of permission codes.

    Lookups are exact string matches against the registered codes. There is
    no wildcard or prefix matching: ``admin:users`` and ``admin:users:create``
    are unrelated codes.
    """

    def __init__(
        self,
        definitions: Optional[Iterable[PermissionDefinition]] = None,
        categories: Optional[Iterable[PermissionCategory]] = None,
        default_roles: Optional[Dict[str, DefaultRoleDefinition]] = None,
    ):
        self._definitions: Dict[str, PermissionDefinition] = {}
        for definition in (PERMISSION_DEFINITIONS if definitions is None else definitions):
            self._definitions[definition.code.value] = definition

        self._categories: List[PermissionCategory] = sorted(
            PERMISSION_CATEGORIES if categories is None else categories,
            key=lambda category: category.order,
        )
        self._default_roles: Dict[str, DefaultRoleDefinition] = dict(
            DEFAULT_ROLES if default_roles is None else default_roles
        )
        self._codes: FrozenSet[str] = frozenset(self._definitions)

        logger.debug(f"Permission registry initialized with {len(self._codes)} permissions")

    def is_valid(self, code: str) -> bool:
        """Check whether a code is registered."""
        return str(code) in self._codes

    def filter_valid(self, codes: Iterable[str]) -> FrozenSet[str]:
        """
        Keep only registered codes, deduplicated.

        Args:
            codes: Raw codes, typically read from a role row

        Returns:
            Frozen set of the registered codes among ``codes``
        """
        return frozenset(str(code) for code in codes) & self._codes

    def validate_codes(self, codes: Iterable[str]) -> None:
        """
        Validate a collection of codes at startup.

        Raises:
            InvalidPermissionCodeError: naming every code not in the registry
        """
        unknown = {str(code) for code in codes} - self._codes
        if unknown:
            raise InvalidPermissionCodeError(unknown)

    def get_definition(self, code: str) -> Optional[PermissionDefinition]:
        """Get the catalog entry of a code, or None when it is not registered."""
        return self._definitions.get(str(code))

    def get_by_category(self, category: str) -> List[PermissionDefinition]:
        """All definitions of one category, in catalog order."""
        return [d for d in self._definitions.values() if d.category == category]

    def categories(self) -> List[PermissionCategory]:
        """Categories sorted by their display order."""
        return list(self._categories)

    def codes(self) -> FrozenSet[str]:
        return self._codes

    def is_admin_permission(self, code: str) -> bool:
        """True when the code belongs to the ``admin`` category."""
        definition = self.get_definition(code)
        return definition is not None and definition.category == "admin"

    def default_roles(self) -> List[DefaultRoleDefinition]:
        return list(self._default_roles.values())

    def get_default_role(self) -> DefaultRoleDefinition:
        """
        Get the role assigned to new organization members.

        Falls back to the Sales role when no definition is flagged as default.
        """
        for role in self._default_roles.values():
            if role.is_default:
                return role
        return DEFAULT_ROLES["SALES"]

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and str(code) in self._codes

    def __len__(self) -> int:
        return len(self._codes)


@lru_cache()
def get_permission_registry() -> PermissionRegistry:
    """Get the process-wide registry built from the built-in catalog."""
    return PermissionRegistry()
