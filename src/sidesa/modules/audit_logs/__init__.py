"""Audit logs module - read access to the audit trail."""

from fastapi import APIRouter


router = APIRouter(prefix="/audit-logs", tags=["audit"])

# Module metadata
__module_info__ = {
    "name": "audit_logs",
    "version": "1.0.0",
    "description": "Audit trail browsing",
    "dependencies": ["users"],
}

from sidesa.modules.audit_logs import routes  # noqa: F401, E402
