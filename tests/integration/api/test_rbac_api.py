"""Integration tests for role and permission management endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from sidesa.core.audit.models import AuditLog
from sidesa.core.permissions import catalog
from sidesa.core.permissions.models import Role
from sidesa.modules.users.models import User
from tests.conftest import auth_headers


pytestmark = pytest.mark.integration

ROLES_URL = "/api/v1/rbac/roles"


class TestAccess:
    """Every endpoint requires users.manage."""

    async def test_requires_authentication(self, client: AsyncClient, roles):
        response = await client.get(ROLES_URL)

        assert response.status_code == 401

    @pytest.mark.parametrize("role", [catalog.ADMIN_DESA, catalog.OPERATOR, catalog.VIEWER])
    async def test_requires_users_manage(
        self, client: AsyncClient, make_user, roles: dict[str, Role], role: str
    ):
        user = await make_user(roles[role])
        response = await client.get(ROLES_URL, headers=auth_headers(user))

        assert response.status_code == 403
        data = response.json()
        assert data["required_permission"] == "users.manage"

    async def test_denial_is_audited(
        self, client: AsyncClient, db: AsyncSession, viewer: User
    ):
        viewer_id = viewer.id

        response = await client.post(
            ROLES_URL,
            headers=auth_headers(viewer),
            json={
                "name": "Penyusup",
                "description": "Tidak boleh",
                "permission_ids": ["citizens.read"],
            },
        )
        assert response.status_code == 403

        result = await db.execute(
            select(AuditLog).where(AuditLog.outcome == "denied")
        )
        entry = result.scalar_one()
        assert entry.actor_id == viewer_id
        assert entry.action == "permission_denied"
        assert entry.request_id is not None
        assert await db.scalar(select(Role).where(Role.name == "Penyusup")) is None


class TestPermissionCatalog:
    async def test_list_catalog(self, client: AsyncClient, admin_headers):
        response = await client.get("/api/v1/rbac/permissions", headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == len(catalog.list_permissions())
        assert data["items"][0]["id"] == "users.manage"
        assert {p["action"] for p in data["by_resource"]["letters"]} == {
            "manage",
            "read",
            "create",
            "process",
            "approve",
        }


class TestRoles:
    """Tests for role CRUD endpoints."""

    async def test_list_roles(self, client: AsyncClient, admin_headers):
        response = await client.get(ROLES_URL, headers=admin_headers)

        assert response.status_code == 200
        data = response.json()
        by_name = {r["name"]: r for r in data["items"]}
        assert set(catalog.SYSTEM_ROLES) <= set(by_name)
        assert by_name[catalog.SUPER_ADMIN]["is_system"] is True
        assert by_name[catalog.SUPER_ADMIN]["user_count"] == 1

    async def test_create_role(self, client: AsyncClient, admin_headers):
        response = await client.post(
            ROLES_URL,
            headers=admin_headers,
            json={
                "name": "Sekretaris",
                "description": "Sekretaris desa",
                "permission_ids": ["letters.read", "letters.create"],
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Sekretaris"
        assert data["is_system"] is False
        assert data["user_count"] == 0
        assert [p["id"] for p in data["permissions"]] == ["letters.create", "letters.read"]

    async def test_create_duplicate_name(self, client: AsyncClient, admin_headers):
        response = await client.post(
            ROLES_URL,
            headers=admin_headers,
            json={
                "name": catalog.OPERATOR,
                "description": "Duplikat",
                "permission_ids": ["citizens.read"],
            },
        )

        assert response.status_code == 409

    async def test_create_with_unknown_permission(self, client: AsyncClient, admin_headers):
        response = await client.post(
            ROLES_URL,
            headers=admin_headers,
            json={
                "name": "Aneh",
                "description": "Izin tidak dikenal",
                "permission_ids": ["rockets.launch"],
            },
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "permission_ids"

    async def test_create_without_permissions(self, client: AsyncClient, admin_headers):
        response = await client.post(
            ROLES_URL,
            headers=admin_headers,
            json={"name": "Kosong", "description": "Kosong", "permission_ids": []},
        )

        assert response.status_code == 400

    async def test_get_role(self, client: AsyncClient, admin_headers, staff_role: Role):
        response = await client.get(f"{ROLES_URL}/Staff", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["description"] == "Staf pelayanan"

    async def test_get_missing_role(self, client: AsyncClient, admin_headers):
        response = await client.get(f"{ROLES_URL}/Tidak Ada", headers=admin_headers)

        assert response.status_code == 404

    async def test_update_role(self, client: AsyncClient, admin_headers, staff_role: Role):
        response = await client.put(
            f"{ROLES_URL}/Staff",
            headers=admin_headers,
            json={"permission_ids": ["families.read", "families.create"]},
        )

        assert response.status_code == 200
        data = response.json()
        assert [p["id"] for p in data["permissions"]] == [
            "families.create",
            "families.read",
        ]
        assert data["description"] == "Staf pelayanan"

    async def test_update_takes_effect_for_next_request(
        self, client: AsyncClient, admin_headers, staff_role: Role, make_user
    ):
        staff_user = await make_user(staff_role)
        headers = auth_headers(staff_user)

        before = await client.get("/api/v1/auth/me", headers=headers)
        assert "citizens.create" in before.json()["permissions"]

        await client.put(
            f"{ROLES_URL}/Staff",
            headers=admin_headers,
            json={"permission_ids": ["citizens.read"]},
        )

        after = await client.get("/api/v1/auth/me", headers=headers)
        assert after.json()["permissions"] == ["citizens.read"]

    @pytest.mark.parametrize("name", sorted(catalog.SYSTEM_ROLES))
    async def test_update_system_role_forbidden(
        self, client: AsyncClient, admin_headers, name: str
    ):
        response = await client.put(
            f"{ROLES_URL}/{name}",
            headers=admin_headers,
            json={"permission_ids": ["citizens.read"]},
        )

        assert response.status_code == 403
        assert response.json()["type"].endswith("/system_role")

    async def test_delete_role(self, client: AsyncClient, admin_headers, staff_role: Role):
        response = await client.delete(f"{ROLES_URL}/Staff", headers=admin_headers)
        assert response.status_code == 204

        missing = await client.get(f"{ROLES_URL}/Staff", headers=admin_headers)
        assert missing.status_code == 404

    async def test_delete_role_with_users(
        self, client: AsyncClient, admin_headers, staff_role: Role, make_user
    ):
        await make_user(staff_role)

        response = await client.delete(f"{ROLES_URL}/Staff", headers=admin_headers)

        assert response.status_code == 409
        assert response.json()["user_count"] == 1

    async def test_delete_system_role_forbidden(self, client: AsyncClient, admin_headers):
        response = await client.delete(
            f"{ROLES_URL}/{catalog.VIEWER}", headers=admin_headers
        )

        assert response.status_code == 403

    async def test_list_role_users(
        self, client: AsyncClient, admin_headers, staff_role: Role, make_user
    ):
        user = await make_user(staff_role, username="petugas")

        response = await client.get(f"{ROLES_URL}/Staff/users", headers=admin_headers)

        assert response.status_code == 200
        assert [u["id"] for u in response.json()] == [str(user.id)]

    async def test_create_strips_name(self, client: AsyncClient, admin_headers):
        response = await client.post(
            ROLES_URL,
            headers=admin_headers,
            json={
                "name": "  Kader Posyandu ",
                "description": "Kader kesehatan",
                "permission_ids": ["citizens.read"],
            },
        )

        assert response.status_code == 201
        assert response.json()["name"] == "Kader Posyandu"

    @pytest.mark.parametrize("name", ["Super Admin ", "super admin", "ADMIN DESA"])
    async def test_create_system_role_look_alike(
        self, client: AsyncClient, admin_headers, name: str
    ):
        response = await client.post(
            ROLES_URL,
            headers=admin_headers,
            json={
                "name": name,
                "description": "Tiruan",
                "permission_ids": ["citizens.read"],
            },
        )

        assert response.status_code == 409


class TestAuditWriteFailure:
    """A failed audit insert must not undo the change it describes."""

    async def test_role_committed_without_audit_table(
        self, client: AsyncClient, db: AsyncSession, admin_headers
    ):
        await db.execute(text("DROP TABLE audit_logs"))
        await db.commit()

        response = await client.post(
            ROLES_URL,
            headers=admin_headers,
            json={
                "name": "Kader",
                "description": "Kader desa",
                "permission_ids": ["citizens.read"],
            },
        )

        assert response.status_code == 201

        await db.rollback()
        role = await db.scalar(select(Role).where(Role.name == "Kader"))
        assert role is not None
        assert role.description == "Kader desa"
