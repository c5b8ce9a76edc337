"""Pydantic schemas for role and permission management."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from sidesa.core.constants import MAX_DESCRIPTION_LENGTH, MAX_ROLE_NAME_LENGTH
from sidesa.core.permissions import catalog
from sidesa.core.permissions.models import Role
from sidesa.core.permissions.schemas import PermissionResponse


class RoleCreate(BaseModel):
    """Schema for creating a role."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=MAX_ROLE_NAME_LENGTH)
    description: str = Field(..., min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    permission_ids: list[str] = Field(
        ...,
        min_length=1,
        description='Permission identifiers in "resource.action" form',
    )


class RoleUpdate(BaseModel):
    """Schema for replacing a role's permission set."""

    description: str | None = Field(None, min_length=1, max_length=MAX_DESCRIPTION_LENGTH)
    permission_ids: list[str] = Field(..., min_length=1)


class RoleResponse(BaseModel):
    """Schema for role response data."""

    id: UUID
    name: str
    description: str | None = None
    is_system: bool
    permissions: list[PermissionResponse]
    user_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_role(cls, role: Role, user_count: int) -> "RoleResponse":
        permissions = sorted(role.permissions, key=lambda p: (p.resource, p.action))
        return cls(
            id=role.id,
            name=role.name,
            description=role.description,
            is_system=catalog.is_system_role(role.name),
            permissions=[
                PermissionResponse(
                    id=p.permission_id,
                    resource=p.resource,
                    action=p.action,
                    name=p.name,
                    description=p.description,
                )
                for p in permissions
            ],
            user_count=user_count,
            created_at=role.created_at,
            updated_at=role.updated_at,
        )


class RoleListResponse(BaseModel):
    """Schema for listing roles."""

    items: list[RoleResponse]
    total: int


class PermissionCatalogResponse(BaseModel):
    """The full permission catalog, flat and grouped by resource."""

    items: list[PermissionResponse]
    by_resource: dict[str, list[PermissionResponse]]
    total: int
