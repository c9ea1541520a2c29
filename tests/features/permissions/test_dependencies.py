"""Tests for the FastAPI authorization dependencies."""

from unittest.mock import AsyncMock

import pytest
from fastapi import Depends, FastAPI, Header
from fastapi.testclient import TestClient

from tenancy_authz.core.exceptions import InvalidPermissionCodeError, UnknownResourceTypeError
from tenancy_authz.features.permissions.dependencies import AccessPrincipal, AuthorizationDependencies
from tenancy_authz.features.permissions.entities import PermissionCode
from tenancy_authz.features.permissions.services import create_authorization_engine


async def principal_from_headers(
    x_user_id: str = Header(...),
    x_organization_id: str = Header(...),
) -> AccessPrincipal:
    return AccessPrincipal(user_id=x_user_id, organization_id=x_organization_id)


def build_app(engine) -> FastAPI:
    deps = AuthorizationDependencies(engine, principal_from_headers)
    app = FastAPI()

    @app.get("/customers")
    async def list_customers(
        principal: AccessPrincipal = Depends(deps.require_permission(PermissionCode.CUSTOMERS_READ)),
    ):
        return {"user_id": principal.user_id}

    @app.get("/reports")
    async def reports(
        principal: AccessPrincipal = Depends(
            deps.require_any_permission(["reports:advanced", "reports:export"])
        ),
    ):
        return {"ok": True}

    @app.post("/customers/assign")
    async def assign_customers(
        principal: AccessPrincipal = Depends(
            deps.require_all_permissions(["customers:read", "customers:assign"])
        ),
    ):
        return {"ok": True}

    @app.get("/customers/{customer_id}")
    async def get_customer(
        customer_id: str,
        principal: AccessPrincipal = Depends(deps.require_resource_access("customer", "customer_id")),
    ):
        return {"id": customer_id}

    return app


def headers(user_id: str, organization_id: str = "org-a"):
    return {"X-User-Id": user_id, "X-Organization-Id": organization_id}


class TestAuthorizationDependencies:
    """Test HTTP answers produced by the dependencies."""

    @pytest.fixture
    def client(self, engine, populated_store):
        return TestClient(build_app(engine))

    def test_permission_granted(self, client):
        response = client.get("/customers", headers=headers("alice"))

        assert response.status_code == 200
        assert response.json() == {"user_id": "alice"}

    def test_suspended_member_gets_403_with_reason(self, client):
        response = client.get("/customers", headers=headers("sam"))

        assert response.status_code == 403
        assert response.json()["detail"] == "User membership is suspended"

    def test_non_member_gets_403(self, client):
        response = client.get("/customers", headers=headers("ghost"))

        assert response.status_code == 403
        assert response.json()["detail"] == "User is not a member of this organization"

    def test_any_permission(self, client):
        assert client.get("/reports", headers=headers("mona")).status_code == 200

        response = client.get("/reports", headers=headers("alice"))
        assert response.status_code == 403
        assert "reports:advanced" in response.json()["detail"]

    def test_all_permissions_reports_first_missing(self, client):
        assert client.post("/customers/assign", headers=headers("mona")).status_code == 200

        response = client.post("/customers/assign", headers=headers("alice"))
        assert response.status_code == 403
        assert response.json()["detail"] == (
            "User does not have the required permission: customers:assign"
        )

    def test_resource_access(self, client, populated_store):
        populated_store.add_resource("customer", "c-own", "org-a", assigned_to_id="alice")
        populated_store.add_resource("customer", "c-other", "org-a", assigned_to_id="mona")

        assert client.get("/customers/c-own", headers=headers("alice")).status_code == 200
        assert client.get("/customers/c-other", headers=headers("alice")).status_code == 403
        assert client.get("/customers/c-other", headers=headers("mona")).status_code == 200

    def test_store_outage_gets_503(self, store, settings):
        store.get_membership = AsyncMock(side_effect=OSError("connection reset"))
        engine = create_authorization_engine(store, settings=settings)
        client = TestClient(build_app(engine))

        response = client.get("/customers", headers=headers("alice"))

        assert response.status_code == 503
        assert response.headers["Retry-After"] == str(settings.store_retry_after_seconds)

    def test_unknown_resource_type_fails_at_construction(self, engine):
        deps = AuthorizationDependencies(engine, principal_from_headers)

        with pytest.raises(UnknownResourceTypeError):
            deps.require_resource_access("invoice")

    def test_misspelled_code_fails_at_construction(self, engine):
        deps = AuthorizationDependencies(engine, principal_from_headers)

        with pytest.raises(InvalidPermissionCodeError) as exc_info:
            deps.require_permission("custmers:read")

        assert exc_info.value.codes == ["custmers:read"]

    def test_misspelled_code_in_lists_fails_at_construction(self, engine):
        deps = AuthorizationDependencies(engine, principal_from_headers)

        with pytest.raises(InvalidPermissionCodeError) as exc_info:
            deps.require_any_permission(["reports:view", "reprots:export"])
        assert exc_info.value.codes == ["reprots:export"]

        with pytest.raises(InvalidPermissionCodeError):
            deps.require_all_permissions(["customers:read", "customers:asign"])
