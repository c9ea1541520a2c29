"""Role domain entity for the tenancy-authz permissions feature.

Roles are read-only inside the engine: administrative flows elsewhere create
and edit them, and call ``invalidate`` afterwards.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Tuple

from .permission import PermissionCode


@dataclass(frozen=True)
class Role:
    """A named set of permission codes assignable to a membership.

    ``permission_codes`` holds the raw codes as stored; it may contain codes
    the registry does not know, which resolution drops.
    """

    id: str
    name: str
    is_system: bool = False
    permission_codes: FrozenSet[str] = field(default_factory=frozenset)
    organization_id: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def build(
        cls,
        id: str,
        name: str,
        permission_codes: Iterable[str] = (),
        is_system: bool = False,
        organization_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> "Role":
        """Build a role from any iterable of codes (enum members or strings)."""
        return cls(
            id=id,
            name=name,
            is_system=is_system,
            permission_codes=frozenset(str(code) for code in permission_codes),
            organization_id=organization_id,
            description=description,
        )

    @property
    def is_global(self) -> bool:
        """System roles shared across organizations carry no organization id."""
        return self.organization_id is None

    def __str__(self) -> str:
        return f"Role({self.name})"


@dataclass(frozen=True)
class DefaultRoleDefinition:
    """Blueprint of a built-in role seeded into every organization."""

    key: str
    name: str
    description: str
    is_system: bool
    is_default: bool
    permissions: Tuple[PermissionCode, ...]

    def to_role(self, role_id: str, organization_id: Optional[str] = None) -> Role:
        """Materialize the definition as a Role with the given identifier."""
        return Role.build(
            id=role_id,
            name=self.name,
            permission_codes=self.permissions,
            is_system=self.is_system,
            organization_id=organization_id,
            description=self.description,
        )
