"""Audit log API routes."""

from uuid import UUID

from fastapi import Query, Request

from sidesa.api.dependencies import DBSession
from sidesa.core.audit.service import AuditOutcome, Auditor
from sidesa.core.auth.dependencies import CurrentUser
from sidesa.core.constants import MAX_PAGE_SIZE
from sidesa.core.permissions.catalog import READ, SYSTEM
from sidesa.core.permissions.decorators import require_permission
from sidesa.modules.audit_logs import router
from sidesa.modules.audit_logs.schemas import AuditLogListResponse, AuditLogResponse


@router.get(
    "",
    response_model=AuditLogListResponse,
    summary="Search audit logs",
    description="Returns audit entries, newest first, filtered by actor, action, resource and outcome.",
)
@require_permission(SYSTEM, READ)
async def list_audit_logs(
    auditor: Auditor,
    current_user: CurrentUser,
    db: DBSession,
    request: Request,
    actor_id: UUID | None = Query(None),
    action: str | None = Query(None),
    resource: str | None = Query(None),
    outcome: AuditOutcome | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
) -> AuditLogListResponse:
    """Search the audit trail."""
    entries, total = await auditor.search(
        actor_id=actor_id,
        action=action,
        resource=resource,
        outcome=outcome,
        page=page,
        page_size=page_size,
    )
    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(e) for e in entries],
        total=total,
        page=page,
        page_size=page_size,
    )
