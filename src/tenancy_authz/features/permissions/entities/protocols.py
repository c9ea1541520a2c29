"""Protocol interfaces for permission feature dependency injection.

Defines the contract of the membership store the engine reads from. Any
persistence layer (asyncpg, an ORM, a remote service) plugs in by
implementing these three coroutines.
"""

from abc import abstractmethod
from typing import List, Optional, Protocol, runtime_checkable

from .membership import Membership, MembershipSummary, ResourceOwnership


@runtime_checkable
class MembershipStore(Protocol):
    """Protocol for reading memberships, roles and record ownership.

    Implementations raise StoreUnavailableError when the backing system is
    unreachable or returns malformed rows; "not found" is always ``None``.
    """

    @abstractmethod
    async def get_membership(self, user_id: str, organization_id: str) -> Optional[Membership]:
        """Get the membership (with its role and raw permission codes) of a user in an organization."""
        ...

    @abstractmethod
    async def get_resource_ownership(self, resource_type: str, resource_id: str) -> Optional[ResourceOwnership]:
        """Get organization and ownership attribution of a single record."""
        ...

    @abstractmethod
    async def list_active_memberships(self, user_id: str) -> List[MembershipSummary]:
        """List the user's active memberships across organizations."""
        ...
