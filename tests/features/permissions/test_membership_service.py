"""Tests for membership queries."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from tenancy_authz.config.constants import MembershipStatus
from tenancy_authz.config.settings import AuthzSettings
from tenancy_authz.core.exceptions import StoreUnavailableError
from tenancy_authz.features.permissions.entities import Role
from tenancy_authz.features.permissions.services import create_authorization_engine


class TestMembershipQueries:
    """Test membership, role and organization lookups."""

    @pytest.mark.asyncio
    async def test_is_organization_member_requires_active(self, engine, populated_store):
        assert await engine.is_organization_member("alice", "org-a")
        assert not await engine.is_organization_member("sam", "org-a")
        assert not await engine.is_organization_member("ivy", "org-a")
        assert not await engine.is_organization_member("ghost", "org-a")

    @pytest.mark.asyncio
    async def test_get_user_role_any_status(self, engine, populated_store, sales_role):
        assert await engine.get_user_role("sam", "org-a") == sales_role
        assert await engine.get_user_role("ghost", "org-a") is None

    @pytest.mark.asyncio
    async def test_has_role(self, engine, populated_store):
        assert await engine.has_role("mona", "org-a", "Manager")
        assert not await engine.has_role("mona", "org-a", "Sales")
        assert not await engine.has_role("ghost", "org-a", "Manager")

    @pytest.mark.asyncio
    async def test_is_admin_uses_user_management_permission(self, engine, store, admin_role, manager_role):
        store.add_membership("a1", "org-a", admin_role)
        store.add_membership("m1", "org-a", manager_role)

        assert await engine.is_admin("a1", "org-a")
        assert not await engine.is_admin("m1", "org-a")

    @pytest.mark.asyncio
    async def test_is_super_admin_by_role_name(self, engine, store, super_admin_role, admin_role):
        store.add_membership("s1", "org-a", super_admin_role)
        store.add_membership("a1", "org-a", admin_role)

        assert await engine.is_super_admin("s1", "org-a")
        assert not await engine.is_super_admin("a1", "org-a")

    @pytest.mark.asyncio
    async def test_super_admin_role_name_is_configurable(self, store, admin_role):
        settings = AuthzSettings(_env_file=None, super_admin_role_name="Admin")
        engine = create_authorization_engine(store, settings=settings)
        store.add_membership("a1", "org-a", admin_role)

        assert await engine.is_super_admin("a1", "org-a")

    @pytest.mark.asyncio
    async def test_membership_queries_are_not_cached(self, engine, populated_store):
        await engine.is_organization_member("alice", "org-a")
        await engine.is_organization_member("alice", "org-a")

        assert populated_store.call_counts["get_membership"] == 2


class TestPermissionContext:
    """Test the full permission context."""

    @pytest.mark.asyncio
    async def test_context_of_active_member(self, engine, populated_store, manager_role):
        context = await engine.get_permission_context("mona", "org-a")

        assert context.role == manager_role
        assert context.is_active
        assert context.effective_permissions == context.role_permissions
        assert "customers:assign" in context.role_permissions

    @pytest.mark.asyncio
    async def test_context_of_suspended_member(self, engine, populated_store):
        context = await engine.get_permission_context("sam", "org-a")

        assert context.membership_status is MembershipStatus.SUSPENDED
        assert "customers:read" in context.role_permissions
        assert context.effective_permissions == frozenset()

    @pytest.mark.asyncio
    async def test_context_filters_unknown_codes(self, engine, store):
        role = Role.build("r1", "Legacy", ["customers:read", "legacy:export"])
        store.add_membership("u1", "org-a", role)

        context = await engine.get_permission_context("u1", "org-a")

        assert context.role_permissions == frozenset({"customers:read"})

    @pytest.mark.asyncio
    async def test_context_of_roleless_invitation(self, engine, store):
        store.add_membership("u1", "org-a", None, status=MembershipStatus.INVITED)

        context = await engine.get_permission_context("u1", "org-a")

        assert context is not None
        assert context.role is None
        assert context.membership_status is MembershipStatus.INVITED
        assert context.role_permissions == frozenset()
        assert context.effective_permissions == frozenset()

    @pytest.mark.asyncio
    async def test_no_context_without_membership(self, engine, store):
        assert await engine.get_permission_context("ghost", "org-a") is None


class TestUserOrganizations:
    """Test organization listings."""

    @pytest.mark.asyncio
    async def test_list_user_organizations_only_active(self, engine, store, sales_role, viewer_role):
        store.add_membership("u1", "org-a", sales_role)
        store.add_membership("u1", "org-b", viewer_role)
        store.add_membership("u1", "org-c", sales_role, status=MembershipStatus.SUSPENDED)

        organizations = await engine.list_user_organizations("u1")

        assert {m.organization_id for m in organizations} == {"org-a", "org-b"}
        assert {m.role_name for m in organizations} == {"Sales", "Viewer"}

    @pytest.mark.asyncio
    async def test_default_organization_is_earliest_joined(self, engine, store, sales_role):
        store.add_membership("u1", "org-new", sales_role, joined_at=datetime(2024, 6, 1, tzinfo=timezone.utc))
        store.add_membership("u1", "org-old", sales_role, joined_at=datetime(2023, 1, 1, tzinfo=timezone.utc))
        store.add_membership(
            "u1", "org-oldest", sales_role,
            status=MembershipStatus.INVITED,
            joined_at=datetime(2020, 1, 1, tzinfo=timezone.utc),
        )

        default = await engine.get_default_organization("u1")

        assert default.organization_id == "org-old"

    @pytest.mark.asyncio
    async def test_default_organization_none_without_memberships(self, engine):
        assert await engine.get_default_organization("ghost") is None

    @pytest.mark.asyncio
    async def test_listing_failure_is_wrapped(self, store, settings):
        store.list_active_memberships = AsyncMock(side_effect=OSError("network unreachable"))
        engine = create_authorization_engine(store, settings=settings)

        with pytest.raises(StoreUnavailableError) as exc_info:
            await engine.list_user_organizations("u1")

        assert exc_info.value.operation == "list_active_memberships"
