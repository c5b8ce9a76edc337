"""Integration tests for user management endpoints."""

from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from sidesa.core.permissions import catalog
from sidesa.core.permissions.models import Role
from sidesa.modules.users.models import User
from tests.conftest import auth_headers
from tests.factories.user import UserCreateFactory


pytestmark = pytest.mark.integration

USERS_URL = "/api/v1/users"


class TestListUsers:
    """Tests for GET /api/v1/users."""

    async def test_list_users(
        self, client: AsyncClient, admin_headers, operator: User, viewer: User
    ):
        response = await client.get(USERS_URL, headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert {u["username"] for u in data["items"]} == {
            "superadmin",
            "operator",
            "viewer",
        }

    async def test_filter_by_role(self, client: AsyncClient, admin_headers, operator: User):
        response = await client.get(
            USERS_URL, headers=admin_headers, params={"role": catalog.OPERATOR}
        )

        data = response.json()
        assert data["total"] == 1
        assert data["items"][0]["role"]["name"] == catalog.OPERATOR

    async def test_filter_by_status(
        self, client: AsyncClient, admin_headers, make_user, roles: dict[str, Role]
    ):
        await make_user(roles[catalog.VIEWER], username="nonaktif", is_active=False)

        response = await client.get(
            USERS_URL, headers=admin_headers, params={"status": "inactive"}
        )

        data = response.json()
        assert [u["username"] for u in data["items"]] == ["nonaktif"]

    async def test_search(self, client: AsyncClient, admin_headers, operator: User):
        response = await client.get(
            USERS_URL, headers=admin_headers, params={"search": "OPERA"}
        )

        assert [u["username"] for u in response.json()["items"]] == ["operator"]

    async def test_admin_desa_can_read(self, client: AsyncClient, admin_desa: User):
        response = await client.get(USERS_URL, headers=auth_headers(admin_desa))

        assert response.status_code == 200

    async def test_viewer_cannot_read(self, client: AsyncClient, viewer: User):
        response = await client.get(USERS_URL, headers=auth_headers(viewer))

        assert response.status_code == 403
        assert response.json()["required_permission"] == "users.read"


class TestCreateUser:
    """Tests for POST /api/v1/users."""

    async def test_create_user(self, client: AsyncClient, admin_headers):
        body = UserCreateFactory.build(role=catalog.VIEWER).model_dump()

        response = await client.post(USERS_URL, headers=admin_headers, json=body)

        assert response.status_code == 201
        data = response.json()
        assert data["username"] == body["username"]
        assert data["role"]["name"] == catalog.VIEWER
        assert data["is_active"] is True
        assert "password" not in data

    async def test_duplicate_username(
        self, client: AsyncClient, admin_headers, operator: User
    ):
        body = UserCreateFactory.build(username=operator.username).model_dump()

        response = await client.post(USERS_URL, headers=admin_headers, json=body)

        assert response.status_code == 409

    async def test_unknown_role(self, client: AsyncClient, admin_headers):
        body = UserCreateFactory.build(role="Kepala Dusun").model_dump()

        response = await client.post(USERS_URL, headers=admin_headers, json=body)

        assert response.status_code == 400

    async def test_short_password(self, client: AsyncClient, admin_headers):
        body = UserCreateFactory.build().model_dump()
        body["password"] = "123"

        response = await client.post(USERS_URL, headers=admin_headers, json=body)

        assert response.status_code == 400

    async def test_operator_cannot_create(self, client: AsyncClient, operator: User):
        body = UserCreateFactory.build().model_dump()

        response = await client.post(USERS_URL, headers=auth_headers(operator), json=body)

        assert response.status_code == 403


class TestSingleUser:
    """Tests for /api/v1/users/{user_id} endpoints."""

    async def test_get_user(self, client: AsyncClient, admin_headers, operator: User):
        response = await client.get(f"{USERS_URL}/{operator.id}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["email"] == operator.email

    async def test_get_missing_user(self, client: AsyncClient, admin_headers):
        response = await client.get(f"{USERS_URL}/{uuid4()}", headers=admin_headers)

        assert response.status_code == 404

    async def test_update_role(self, client: AsyncClient, admin_headers, operator: User):
        response = await client.patch(
            f"{USERS_URL}/{operator.id}",
            headers=admin_headers,
            json={"role": catalog.VIEWER},
        )

        assert response.status_code == 200
        assert response.json()["role"]["name"] == catalog.VIEWER

    async def test_deactivate_and_reactivate(
        self, client: AsyncClient, admin_headers, operator: User
    ):
        url = f"{USERS_URL}/{operator.id}/status"

        off = await client.patch(url, headers=admin_headers, json={"is_active": False})
        on = await client.patch(url, headers=admin_headers, json={"is_active": True})

        assert off.json()["is_active"] is False
        assert on.json()["is_active"] is True

    async def test_cannot_deactivate_self(
        self, client: AsyncClient, admin_headers, super_admin: User
    ):
        response = await client.patch(
            f"{USERS_URL}/{super_admin.id}/status",
            headers=admin_headers,
            json={"is_active": False},
        )

        assert response.status_code == 400

    async def test_delete_is_soft(
        self, client: AsyncClient, db: AsyncSession, admin_headers, operator: User
    ):
        user_id = operator.id

        response = await client.delete(f"{USERS_URL}/{user_id}", headers=admin_headers)
        assert response.status_code == 204

        user = await db.get(User, user_id)
        assert user is not None
        assert user.is_active is False

    async def test_admin_desa_cannot_delete(
        self, client: AsyncClient, admin_desa: User, operator: User
    ):
        response = await client.delete(
            f"{USERS_URL}/{operator.id}", headers=auth_headers(admin_desa)
        )

        assert response.status_code == 403

    async def test_user_permissions(
        self, client: AsyncClient, admin_headers, staff_role: Role, make_user
    ):
        user = await make_user(staff_role)

        response = await client.get(
            f"{USERS_URL}/{user.id}/permissions", headers=admin_headers
        )

        assert response.status_code == 200
        data = response.json()
        assert data["role"] == "Staff"
        assert [p["id"] for p in data["permissions"]] == [
            "citizens.read",
            "citizens.create",
        ]
