"""Pydantic schemas shared by every endpoint that returns permissions."""

from pydantic import BaseModel, ConfigDict

from sidesa.core.permissions.catalog import CatalogPermission


class PermissionResponse(BaseModel):
    """A single grantable permission."""

    id: str
    resource: str
    action: str
    name: str
    description: str | None = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_catalog(cls, permission: CatalogPermission) -> "PermissionResponse":
        return cls(
            id=permission.id,
            resource=permission.resource,
            action=permission.action,
            name=permission.name,
            description=permission.description or None,
        )
