"""Audit trail for mutations and permission decisions."""

from sidesa.core.audit.models import AuditLog
from sidesa.core.audit.service import (
    AuditContext,
    Auditor,
    AuditOutcome,
    AuditRecorder,
    get_audit_recorder,
)


__all__ = [
    "AuditContext",
    "AuditLog",
    "AuditOutcome",
    "AuditRecorder",
    "Auditor",
    "get_audit_recorder",
]
