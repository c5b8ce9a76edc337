"""Role-based access control: catalog, models and the permission gate."""

from sidesa.core.permissions import catalog
from sidesa.core.permissions.catalog import (
    SYSTEM_ROLES,
    CatalogPermission,
    SystemRole,
)
from sidesa.core.permissions.checker import PermissionGate
from sidesa.core.permissions.decorators import require_permission
from sidesa.core.permissions.models import Permission, Role, role_permissions


__all__ = [
    "SYSTEM_ROLES",
    "CatalogPermission",
    "Permission",
    "PermissionGate",
    "Role",
    "SystemRole",
    "catalog",
    "require_permission",
    "role_permissions",
]
