"""Integration tests for the require_permission route decorator."""

import pytest
from fastapi import APIRouter, FastAPI, Request
from httpx import ASGITransport, AsyncClient

from sidesa.api.dependencies import DBSession
from sidesa.core.auth.dependencies import CurrentUser
from sidesa.core.permissions import require_permission
from sidesa.core.permissions.models import Role
from sidesa.modules.users.models import User
from tests.conftest import auth_headers


pytestmark = pytest.mark.integration

probe_router = APIRouter(prefix="/probe")


@probe_router.get("/citizens")
@require_permission("citizens", "read")
async def read_citizens(current_user: CurrentUser, db: DBSession, request: Request):
    return {"ok": True, "user": current_user.username}


@probe_router.delete("/citizens")
@require_permission("citizens", "delete")
async def delete_citizens(current_user: CurrentUser, db: DBSession, request: Request):
    return {"ok": True}


@probe_router.get("/unknown")
@require_permission("rockets", "launch")
async def launch(current_user: CurrentUser, db: DBSession, request: Request):
    return {"ok": True}


@pytest.fixture
async def probe_client(app: FastAPI):
    app.include_router(probe_router)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
async def staff_user(make_user, staff_role: Role) -> User:
    return await make_user(staff_role, username="staff")


class TestRequirePermissionDecorator:
    async def test_granted(self, probe_client: AsyncClient, staff_user: User):
        response = await probe_client.get(
            "/probe/citizens", headers=auth_headers(staff_user)
        )

        assert response.status_code == 200
        assert response.json() == {"ok": True, "user": "staff"}

    async def test_not_granted(self, probe_client: AsyncClient, staff_user: User):
        response = await probe_client.delete(
            "/probe/citizens", headers=auth_headers(staff_user)
        )

        assert response.status_code == 403
        body = response.json()
        assert body["status"] == 403
        assert body["required_permission"] == "citizens.delete"

    async def test_unknown_permission_denied_for_everyone(
        self, probe_client: AsyncClient, admin_headers
    ):
        response = await probe_client.get("/probe/unknown", headers=admin_headers)

        assert response.status_code == 403

    async def test_missing_token(self, probe_client: AsyncClient, roles):
        response = await probe_client.get("/probe/citizens")

        assert response.status_code == 401

    async def test_preserves_function_metadata(self):
        assert read_citizens.__name__ == "read_citizens"
