"""Memory membership store.

ONLY in-memory implementation - implements the MembershipStore protocol
for development, testing, and single-instance deployments.
"""

import asyncio
from collections import Counter
from dataclasses import replace
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from ....config.constants import MembershipStatus
from ..entities import Membership, MembershipSummary, ResourceOwnership, Role


def _type_key(resource_type) -> str:
    return getattr(resource_type, "value", resource_type)


class InMemoryMembershipStore:
    """In-memory membership store.

    ``call_counts`` counts calls per protocol method, which lets tests
    assert how often the engine actually reached the store.
    """

    def __init__(self):
        self._memberships: Dict[Tuple[str, str], Membership] = {}
        self._resources: Dict[Tuple[str, str], ResourceOwnership] = {}
        self.call_counts: Counter = Counter()
        self._lock = asyncio.Lock()

    # Protocol methods

    async def get_membership(self, user_id: str, organization_id: str) -> Optional[Membership]:
        self.call_counts["get_membership"] += 1
        async with self._lock:
            return self._memberships.get((user_id, organization_id))

    async def get_resource_ownership(self, resource_type: str, resource_id: str) -> Optional[ResourceOwnership]:
        self.call_counts["get_resource_ownership"] += 1
        async with self._lock:
            return self._resources.get((resource_type, resource_id))

    async def list_active_memberships(self, user_id: str) -> List[MembershipSummary]:
        self.call_counts["list_active_memberships"] += 1
        async with self._lock:
            memberships = [
                m for m in self._memberships.values()
                if m.user_id == user_id and m.is_active and m.role is not None
            ]

        # Earliest joined first, undated last
        memberships.sort(key=lambda m: (m.joined_at is None, m.joined_at or datetime.min.replace(tzinfo=timezone.utc)))
        return [
            MembershipSummary(
                organization_id=m.organization_id,
                role_id=m.role.id,
                role_name=m.role.name,
                joined_at=m.joined_at,
            )
            for m in memberships
        ]

    # Mutation helpers; callers invalidate the engine's cache afterwards

    def add_membership(
        self,
        user_id: str,
        organization_id: str,
        role: Role,
        status: MembershipStatus = MembershipStatus.ACTIVE,
        joined_at: Optional[datetime] = None,
    ) -> Membership:
        """Add or replace a membership."""
        membership = Membership(
            user_id=user_id,
            organization_id=organization_id,
            status=status,
            role=role,
            joined_at=joined_at or datetime.now(timezone.utc),
        )
        self._memberships[(user_id, organization_id)] = membership
        return membership

    def set_status(self, user_id: str, organization_id: str, status: MembershipStatus) -> Membership:
        return self._replace(user_id, organization_id, status=status)

    def set_role(self, user_id: str, organization_id: str, role: Role) -> Membership:
        return self._replace(user_id, organization_id, role=role)

    def remove_membership(self, user_id: str, organization_id: str) -> bool:
        return self._memberships.pop((user_id, organization_id), None) is not None

    def add_resource(
        self,
        resource_type: str,
        resource_id: str,
        organization_id: str,
        assigned_to_id: Optional[str] = None,
        created_by_id: Optional[str] = None,
    ) -> ResourceOwnership:
        ownership = ResourceOwnership(
            organization_id=organization_id,
            assigned_to_id=assigned_to_id,
            created_by_id=created_by_id,
        )
        self._resources[(_type_key(resource_type), resource_id)] = ownership
        return ownership

    def remove_resource(self, resource_type: str, resource_id: str) -> bool:
        return self._resources.pop((_type_key(resource_type), resource_id), None) is not None

    def _replace(self, user_id: str, organization_id: str, **changes) -> Membership:
        current = self._memberships.get((user_id, organization_id))
        if current is None:
            raise KeyError(f"No membership for user {user_id} in organization {organization_id}")
        updated = replace(current, **changes)
        self._memberships[(user_id, organization_id)] = updated
        return updated
