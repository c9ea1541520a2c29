"""Membership and ownership entities read from the membership store."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ....config.constants import MembershipStatus
from .role import Role


@dataclass(frozen=True)
class Membership:
    """Binding of a user to an organization with a status and exactly one role.

    ``role`` is only None for a row whose role was deleted; an active
    membership without a role is malformed.
    """

    user_id: str
    organization_id: str
    status: MembershipStatus
    role: Optional[Role]
    joined_at: Optional[datetime] = None

    @property
    def is_active(self) -> bool:
        return self.status is MembershipStatus.ACTIVE


@dataclass(frozen=True)
class MembershipSummary:
    """Projection of an active membership for "which organizations" queries."""

    organization_id: str
    role_id: str
    role_name: str
    joined_at: Optional[datetime] = None


@dataclass(frozen=True)
class ResourceOwnership:
    """Organization and ownership attribution of a single record."""

    organization_id: str
    assigned_to_id: Optional[str] = None
    created_by_id: Optional[str] = None

    def is_owned_by(self, user_id: str) -> bool:
        """True when the user is the assignee or the creator of the record."""
        return user_id in (self.assigned_to_id, self.created_by_id)
