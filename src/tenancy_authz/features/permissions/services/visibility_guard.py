"""Resource visibility guard.

Record-level visibility combining role permissions with record ownership.
A member holding only the read permission of a resource type sees the
records assigned to or created by them; holders of the elevated permission
see every record of the organization.
"""

import logging
from typing import Dict, Iterable, Optional

from ....config.constants import ResourceType
from ....core.exceptions import AuthzError, StoreUnavailableError, UnknownResourceTypeError
from ..entities import (
    MembershipStore,
    PermissionCode,
    ResourceVisibilityRule,
    VisibilityScope,
)
from .access_checker import AccessChecker

logger = logging.getLogger(__name__)


DEFAULT_VISIBILITY_RULES = [
    ResourceVisibilityRule(
        resource_type=ResourceType.CUSTOMER.value,
        read_permission=PermissionCode.CUSTOMERS_READ,
        elevated_permission=PermissionCode.CUSTOMERS_ASSIGN,
    ),
    ResourceVisibilityRule(
        resource_type=ResourceType.DEAL.value,
        read_permission=PermissionCode.DEALS_READ,
        elevated_permission=PermissionCode.DEALS_ASSIGN,
    ),
    ResourceVisibilityRule(
        resource_type=ResourceType.TASK.value,
        read_permission=PermissionCode.TASKS_READ,
        elevated_permission=PermissionCode.TASKS_MANAGE,
    ),
]


class ResourceVisibilityGuard:
    """Decides whether a member may see a given record."""

    def __init__(
        self,
        store: MembershipStore,
        checker: AccessChecker,
        rules: Optional[Iterable[ResourceVisibilityRule]] = None,
    ):
        self.store = store
        self.checker = checker
        self._rules: Dict[str, ResourceVisibilityRule] = {
            rule.resource_type: rule
            for rule in (DEFAULT_VISIBILITY_RULES if rules is None else rules)
        }

    def get_rule(self, resource_type: str) -> ResourceVisibilityRule:
        """
        Get the rule of a resource type.

        Raises:
            UnknownResourceTypeError: no rule is registered for the type
        """
        key = getattr(resource_type, "value", resource_type)
        rule = self._rules.get(key)
        if rule is None:
            raise UnknownResourceTypeError(key)
        return rule

    @property
    def resource_types(self):
        return list(self._rules)

    async def can_access(
        self,
        resource_type: str,
        user_id: str,
        organization_id: str,
        resource_id: str,
    ) -> bool:
        """
        Check whether the user may see one record.

        The ownership lookup is skipped entirely when the user lacks the
        read permission. A missing record is simply not visible.

        Raises:
            UnknownResourceTypeError: no rule is registered for the type
            StoreUnavailableError: the store failed; never reported as "not visible"
        """
        rule = self.get_rule(resource_type)
        resource_type = rule.resource_type

        permissions = await self.checker.get_user_permissions(user_id, organization_id)
        if str(rule.read_permission) not in permissions:
            return False

        ownership = await self._load_ownership(resource_type, resource_id)
        if ownership is None:
            return False
        if ownership.organization_id != organization_id:
            return False

        if str(rule.elevated_permission) in permissions:
            return True
        return ownership.is_owned_by(user_id)

    async def visibility_scope(
        self,
        resource_type: str,
        user_id: str,
        organization_id: str,
    ) -> Optional[VisibilityScope]:
        """
        Get the filter a caller applies when listing records of a type.

        Returns:
            None when nothing is visible, an organization-wide scope for
            holders of the elevated permission, an owner-restricted scope
            otherwise
        """
        rule = self.get_rule(resource_type)

        permissions = await self.checker.get_user_permissions(user_id, organization_id)
        if str(rule.read_permission) not in permissions:
            return None
        if str(rule.elevated_permission) in permissions:
            return VisibilityScope(rule.resource_type, organization_id)
        return VisibilityScope(rule.resource_type, organization_id, owner_user_id=user_id)

    async def _load_ownership(self, resource_type: str, resource_id: str):
        try:
            return await self.store.get_resource_ownership(resource_type, resource_id)
        except AuthzError:
            raise
        except Exception as e:
            logger.error(f"Ownership lookup failed for {resource_type} {resource_id}: {e}")
            raise StoreUnavailableError(
                f"Failed to load {resource_type} ownership: {e}",
                operation="get_resource_ownership",
                details={"resource_type": resource_type, "resource_id": resource_id},
            ) from e
