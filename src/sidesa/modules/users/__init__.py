"""Users module - village staff accounts."""

from fastapi import APIRouter


router = APIRouter(prefix="/users", tags=["users"])

# Module metadata
__module_info__ = {
    "name": "users",
    "version": "1.0.0",
    "description": "User account management",
    "dependencies": [],
}

from sidesa.modules.users import routes  # noqa: F401, E402
