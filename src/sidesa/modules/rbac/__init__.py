"""RBAC module - role management and the permission catalog."""

from fastapi import APIRouter


router = APIRouter(prefix="/rbac", tags=["rbac"])

# Module metadata
__module_info__ = {
    "name": "rbac",
    "version": "1.0.0",
    "description": "Role and permission management",
    "dependencies": ["users"],
}

from sidesa.modules.rbac import routes  # noqa: F401, E402
