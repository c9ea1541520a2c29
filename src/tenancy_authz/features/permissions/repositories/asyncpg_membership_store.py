"""AsyncPG-based membership store implementation.

Concrete implementation of the MembershipStore protocol reading
organization memberships, roles and record ownership from PostgreSQL.
"""

import asyncio
import logging
from typing import Dict, List, Optional

import asyncpg

from ....config.constants import MembershipStatus, ResourceType
from ....config.settings import get_settings
from ....core.exceptions import ConfigurationError, StoreUnavailableError, UnknownResourceTypeError
from ..entities import Membership, MembershipSummary, ResourceOwnership, Role

logger = logging.getLogger(__name__)

# Failures that mean "the store is unavailable", as opposed to "not found"
STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError, asyncio.TimeoutError)


class AsyncPGMembershipStore:
    """AsyncPG implementation of MembershipStore protocol."""

    def __init__(
        self,
        pool: asyncpg.Pool,
        schema: Optional[str] = None,
        resource_tables: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize with a connection pool.

        Args:
            pool: asyncpg pool (anything with an ``acquire()`` context manager)
            schema: Schema holding the tables; ``settings.store_schema`` when omitted
            resource_tables: Extra resource types mapped to tables with
                ``id``, ``organization_id``, ``assigned_to_id`` and
                ``created_by_id`` columns
        """
        self.pool = pool
        self.schema = self._validate_identifier(schema if schema is not None else get_settings().store_schema)
        self._ownership_queries: Dict[str, str] = self._build_ownership_queries(resource_tables or {})

    @staticmethod
    def _validate_identifier(name: str) -> str:
        """Validate a schema or table name to prevent SQL injection."""
        if not isinstance(name, str) or not name.isidentifier():
            raise ConfigurationError(f"Invalid SQL identifier: {name!r}")
        return name

    def _build_ownership_queries(self, resource_tables: Dict[str, str]) -> Dict[str, str]:
        schema = self.schema
        queries = {
            ResourceType.CUSTOMER.value: f"""
                SELECT organization_id, assigned_to_id, created_by_id
                FROM {schema}.customers
                WHERE id = $1
            """,
            # Deals carry no organization of their own; it comes from the customer
            ResourceType.DEAL.value: f"""
                SELECT c.organization_id, d.assigned_to_id, d.created_by_id
                FROM {schema}.deals d
                JOIN {schema}.customers c ON c.id = d.customer_id
                WHERE d.id = $1
            """,
            ResourceType.TASK.value: f"""
                SELECT organization_id, assigned_to_id, created_by_id
                FROM {schema}.tasks
                WHERE id = $1
            """,
        }
        for resource_type, table in resource_tables.items():
            table = self._validate_identifier(table)
            queries[resource_type] = f"""
                SELECT organization_id, assigned_to_id, created_by_id
                FROM {schema}.{table}
                WHERE id = $1
            """
        return queries

    async def get_membership(self, user_id: str, organization_id: str) -> Optional[Membership]:
        """Get a membership with its role and the role's permission codes."""
        query = f"""
            SELECT m.user_id, m.organization_id, m.status, m.joined_at,
                   r.id AS role_id, r.name AS role_name, r.is_system,
                   r.organization_id AS role_organization_id,
                   r.description AS role_description,
                   COALESCE(
                       array_agg(p.code) FILTER (WHERE p.code IS NOT NULL),
                       '{{}}'
                   ) AS permission_codes
            FROM {self.schema}.organization_members m
            LEFT JOIN {self.schema}.roles r ON r.id = m.role_id
            LEFT JOIN {self.schema}.role_permissions rp ON rp.role_id = r.id
            LEFT JOIN {self.schema}.permissions p ON p.id = rp.permission_id
            WHERE m.user_id = $1 AND m.organization_id = $2
            GROUP BY m.user_id, m.organization_id, m.status, m.joined_at,
                     r.id, r.name, r.is_system, r.organization_id, r.description
        """
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, user_id, organization_id)
        except STORE_ERRORS as e:
            logger.error(f"Failed to get membership of user {user_id} in {organization_id}: {e}")
            raise StoreUnavailableError(
                f"Failed to retrieve membership: {e}", operation="get_membership"
            ) from e

        return self._build_membership_from_row(row) if row else None

    def _build_membership_from_row(self, row) -> Membership:
        """Build Membership entity from database row."""
        try:
            status = MembershipStatus(row["status"])
        except ValueError as e:
            raise StoreUnavailableError(
                f"Malformed membership status: {row['status']!r}", operation="get_membership"
            ) from e

        role = None
        if row["role_id"] is not None:
            role = Role.build(
                id=str(row["role_id"]),
                name=row["role_name"],
                permission_codes=row["permission_codes"] or (),
                is_system=bool(row["is_system"]),
                organization_id=(
                    str(row["role_organization_id"]) if row["role_organization_id"] is not None else None
                ),
                description=row["role_description"],
            )

        return Membership(
            user_id=str(row["user_id"]),
            organization_id=str(row["organization_id"]),
            status=status,
            role=role,
            joined_at=row["joined_at"],
        )

    async def get_resource_ownership(self, resource_type: str, resource_id: str) -> Optional[ResourceOwnership]:
        """Get organization and owner attribution of one record."""
        query = self._ownership_queries.get(resource_type)
        if query is None:
            raise UnknownResourceTypeError(resource_type)

        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, resource_id)
        except STORE_ERRORS as e:
            logger.error(f"Failed to get ownership of {resource_type} {resource_id}: {e}")
            raise StoreUnavailableError(
                f"Failed to retrieve {resource_type} ownership: {e}",
                operation="get_resource_ownership",
            ) from e

        if not row:
            return None
        return ResourceOwnership(
            organization_id=str(row["organization_id"]),
            assigned_to_id=str(row["assigned_to_id"]) if row["assigned_to_id"] is not None else None,
            created_by_id=str(row["created_by_id"]) if row["created_by_id"] is not None else None,
        )

    async def list_active_memberships(self, user_id: str) -> List[MembershipSummary]:
        """List active memberships, earliest joined first."""
        query = f"""
            SELECT m.organization_id, m.joined_at, r.id AS role_id, r.name AS role_name
            FROM {self.schema}.organization_members m
            JOIN {self.schema}.roles r ON r.id = m.role_id
            WHERE m.user_id = $1 AND m.status = $2
            ORDER BY m.joined_at ASC NULLS LAST
        """
        try:
            async with self.pool.acquire() as conn:
                rows = await conn.fetch(query, user_id, MembershipStatus.ACTIVE.value)
        except STORE_ERRORS as e:
            logger.error(f"Failed to list memberships of user {user_id}: {e}")
            raise StoreUnavailableError(
                f"Failed to list memberships: {e}", operation="list_active_memberships"
            ) from e

        return [
            MembershipSummary(
                organization_id=str(row["organization_id"]),
                role_id=str(row["role_id"]),
                role_name=row["role_name"],
                joined_at=row["joined_at"],
            )
            for row in rows
        ]
