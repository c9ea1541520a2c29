"""Pytest configuration and fixtures for tenancy-authz tests."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from tenancy_authz.config.constants import MembershipStatus
from tenancy_authz.config.settings import AuthzSettings
from tenancy_authz.features.permissions.entities import PermissionCode, Role
from tenancy_authz.features.permissions.registry import DEFAULT_ROLES, PermissionRegistry
from tenancy_authz.features.permissions.repositories import InMemoryMembershipStore
from tenancy_authz.features.permissions.services import create_authorization_engine


ORG_A = "org-a"
ORG_B = "org-b"


class GatedStore(InMemoryMembershipStore):
    """In-memory store whose membership reads block until released.

    Lets tests hold a resolution in flight and observe what concurrent
    callers do meanwhile.
    """

    def __init__(self):
        super().__init__()
        self.release = asyncio.Event()
        self.entered = asyncio.Event()
        self.fail_with = None

    async def get_membership(self, user_id, organization_id):
        self.call_counts["get_membership"] += 1
        self.entered.set()
        await self.release.wait()
        if self.fail_with is not None:
            raise self.fail_with
        return self._memberships.get((user_id, organization_id))


@pytest.fixture
def settings():
    """Settings isolated from the environment and any local .env file."""
    return AuthzSettings(_env_file=None)


@pytest.fixture
def registry():
    return PermissionRegistry()


@pytest.fixture
def sales_role():
    return DEFAULT_ROLES["SALES"].to_role("role-sales")


@pytest.fixture
def manager_role():
    return DEFAULT_ROLES["MANAGER"].to_role("role-manager")


@pytest.fixture
def admin_role():
    return DEFAULT_ROLES["ADMIN"].to_role("role-admin")


@pytest.fixture
def super_admin_role():
    return DEFAULT_ROLES["SUPER_ADMIN"].to_role("role-super-admin")


@pytest.fixture
def viewer_role():
    return DEFAULT_ROLES["VIEWER"].to_role("role-viewer")


@pytest.fixture
def customer_reader_role():
    """Custom role holding only customers:read."""
    return Role.build("role-reader", "Customer Reader", [PermissionCode.CUSTOMERS_READ])


@pytest.fixture
def store():
    return InMemoryMembershipStore()


@pytest.fixture
def gated_store():
    return GatedStore()


@pytest.fixture
def engine(store, settings):
    return create_authorization_engine(store, settings=settings)


@pytest.fixture
def gated_engine(gated_store, settings):
    return create_authorization_engine(gated_store, settings=settings)


@pytest.fixture
def joined_at():
    return datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def populated_store(store, sales_role, manager_role, viewer_role, joined_at):
    """Store with a handful of members in two organizations."""
    store.add_membership("alice", ORG_A, sales_role, joined_at=joined_at)
    store.add_membership("mona", ORG_A, manager_role, joined_at=joined_at)
    store.add_membership("victor", ORG_A, viewer_role, joined_at=joined_at)
    store.add_membership("sam", ORG_A, sales_role, status=MembershipStatus.SUSPENDED)
    store.add_membership("ivy", ORG_A, sales_role, status=MembershipStatus.INVITED)
    store.add_membership("alice", ORG_B, viewer_role, joined_at=joined_at)
    return store


@pytest.fixture
def mock_connection():
    """Mock asyncpg connection."""
    conn = AsyncMock()
    conn.fetchrow = AsyncMock()
    conn.fetch = AsyncMock()
    return conn


@pytest.fixture
def mock_pool(mock_connection):
    """Mock asyncpg pool whose acquire() yields the mock connection."""
    pool = MagicMock()
    pool.acquire.return_value.__aenter__ = AsyncMock(return_value=mock_connection)
    pool.acquire.return_value.__aexit__ = AsyncMock(return_value=False)
    return pool
