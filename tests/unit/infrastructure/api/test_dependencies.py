"""Unit tests for the platform and organization role guards."""

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from copilot_auth.domain.entities import OrgRole, PlatformRole
from copilot_auth.infrastructure.api.app import register_exception_handlers
from copilot_auth.infrastructure.api.dependencies import (
    OrgAdminUser,
    PlatformAdminUser,
    SuperAdminUser,
)
from copilot_auth.infrastructure.auth import AccessTokenPayload, JWTService, OrganizationClaim


@pytest.fixture
def jwt_service(settings):
    return JWTService(settings)


@pytest.fixture
def guarded_app(jwt_service) -> FastAPI:
    app = FastAPI()
    app.state.jwt_service = jwt_service
    register_exception_handlers(app)

    @app.get("/admin")
    async def admin_only(user: PlatformAdminUser):
        return {"user_id": user.user_id}

    @app.get("/super")
    async def super_only(user: SuperAdminUser):
        return {"user_id": user.user_id}

    @app.get("/orgs/{org_id}/settings")
    async def org_settings(org_id: str, user: OrgAdminUser):
        return {"org_id": org_id}

    return app


@pytest_asyncio.fixture
async def client(guarded_app):
    async with AsyncClient(transport=ASGITransport(app=guarded_app), base_url="http://test") as client:
        yield client


@pytest.fixture
def bearer(jwt_service):
    def _bearer(platform_role: PlatformRole = PlatformRole.USER, **org_roles: OrgRole) -> dict[str, str]:
        token = jwt_service.create_access_token(
            AccessTokenPayload(
                sub="user-1",
                email="alice@example.com",
                platform_role=platform_role.value,
                organizations=[OrganizationClaim(id=org_id, role=role.value) for org_id, role in org_roles.items()],
            )
        )
        return {"Authorization": f"Bearer {token}"}

    return _bearer


class TestRequirePlatformRole:
    @pytest.mark.asyncio
    async def test_admin_passes(self, client, bearer):
        res = await client.get("/admin", headers=bearer(PlatformRole.ADMIN))

        assert res.status_code == 200
        assert res.json() == {"user_id": "user-1"}

    @pytest.mark.asyncio
    async def test_super_admin_always_passes(self, client, bearer):
        res = await client.get("/admin", headers=bearer(PlatformRole.SUPER_ADMIN))

        assert res.status_code == 200

    @pytest.mark.asyncio
    async def test_plain_user_is_forbidden(self, client, bearer):
        res = await client.get("/admin", headers=bearer(PlatformRole.USER))

        assert res.status_code == 403
        assert res.json()["error"]["code"] == "INSUFFICIENT_PERMISSIONS"

    @pytest.mark.asyncio
    async def test_admin_is_not_super_admin(self, client, bearer):
        res = await client.get("/super", headers=bearer(PlatformRole.ADMIN))

        assert res.status_code == 403

    @pytest.mark.asyncio
    async def test_missing_token_is_unauthorized(self, client):
        res = await client.get("/admin")

        assert res.status_code == 401
        assert res.json()["error"]["code"] == "MISSING_TOKEN"


class TestRequireOrgRole:
    @pytest.mark.asyncio
    async def test_admin_of_the_org_passes(self, client, bearer):
        res = await client.get("/orgs/org-1/settings", headers=bearer(**{"org-1": OrgRole.ADMIN}))

        assert res.status_code == 200
        assert res.json() == {"org_id": "org-1"}

    @pytest.mark.asyncio
    async def test_owner_always_passes(self, client, bearer):
        res = await client.get("/orgs/org-1/settings", headers=bearer(**{"org-1": OrgRole.OWNER}))

        assert res.status_code == 200

    @pytest.mark.asyncio
    async def test_insufficient_role_is_forbidden(self, client, bearer):
        res = await client.get("/orgs/org-1/settings", headers=bearer(**{"org-1": OrgRole.MEMBER}))

        assert res.status_code == 403
        assert res.json()["error"]["code"] == "INSUFFICIENT_ORG_PERMISSIONS"

    @pytest.mark.asyncio
    async def test_non_member_is_forbidden(self, client, bearer):
        """Owning another organization grants nothing here."""
        res = await client.get("/orgs/org-1/settings", headers=bearer(**{"org-2": OrgRole.OWNER}))

        assert res.status_code == 403
        assert res.json()["error"]["code"] == "NOT_ORG_MEMBER"

    @pytest.mark.asyncio
    async def test_super_admin_needs_no_membership(self, client, bearer):
        res = await client.get("/orgs/org-1/settings", headers=bearer(PlatformRole.SUPER_ADMIN))

        assert res.status_code == 200
