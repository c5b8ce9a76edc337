"""Audit recorder for logging actions and permission decisions.

Entries are written into the caller's session inside a savepoint:
they commit together with the business change they describe, and a
failed audit insert is rolled back on its own without undoing that
change. Recording never raises to the caller.
"""

from enum import StrEnum
from typing import Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends, Request
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sidesa.api.dependencies import DBSession
from sidesa.core.audit.models import AuditLog
from sidesa.core.logging.middleware import get_client_ip


log = structlog.get_logger()


class AuditOutcome(StrEnum):
    """Outcome of an audited action."""

    SUCCESS = "success"
    DENIED = "denied"
    FAILURE = "failure"


class AuditContext:
    """Request-level information attached to every entry of a request."""

    def __init__(
        self,
        ip_address: str | None = None,
        request_id: str | None = None,
    ) -> None:
        self.ip_address = ip_address
        self.request_id = request_id

    @classmethod
    def from_request(cls, request: Request | None) -> "AuditContext":
        """Build a context from the current request, if any."""
        if request is None:
            return cls()
        return cls(
            ip_address=get_client_ip(request),
            request_id=getattr(request.state, "request_id", None),
        )


class AuditRecorder:
    """Appends audit entries and queries the audit trail."""

    def __init__(
        self,
        session: AsyncSession,
        context: AuditContext | None = None,
    ) -> None:
        self.session = session
        self.context = context or AuditContext()

    async def record(
        self,
        actor_id: UUID | None,
        action: str,
        resource: str,
        resource_id: str | None = None,
        description: str = "",
        outcome: AuditOutcome = AuditOutcome.SUCCESS,
        metadata: dict[str, Any] | None = None,
        commit: bool = False,
    ) -> AuditLog | None:
        """Create an audit log entry.

        Pending changes in the session are flushed first so that errors
        from the primary operation still reach the caller. Only the audit
        insert itself is guarded.

        Args:
            actor_id: User performing the action
            action: Action name, e.g. "create_role"
            resource: Resource category, e.g. "roles"
            resource_id: Identifier of the affected record
            description: Human-readable summary
            outcome: Result of the action
            metadata: Additional context data
            commit: Commit the session right away. Used for denials, which
                happen before any mutation and must survive the rollback
                of the failed request.

        Returns:
            The created entry, or None if it could not be stored
        """
        await self.session.flush()

        entry = AuditLog(
            actor_id=actor_id,
            action=action,
            resource=resource,
            resource_id=resource_id,
            description=description,
            outcome=str(outcome),
            ip_address=self.context.ip_address,
            request_id=self.context.request_id,
            metadata_=metadata,
        )

        try:
            async with self.session.begin_nested():
                self.session.add(entry)
            if commit:
                await self.session.commit()
        except SQLAlchemyError:
            log.exception(
                "audit_record_failed",
                action=action,
                resource=resource,
                resource_id=resource_id,
                actor_id=str(actor_id) if actor_id else None,
                outcome=str(outcome),
            )
            return None

        log.info(
            "audit_recorded",
            action=action,
            resource=resource,
            resource_id=resource_id,
            outcome=str(outcome),
            actor_id=str(actor_id) if actor_id else None,
        )
        return entry

    async def search(
        self,
        actor_id: UUID | None = None,
        action: str | None = None,
        resource: str | None = None,
        outcome: AuditOutcome | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[AuditLog], int]:
        """Search audit entries, newest first.

        Returns:
            Tuple of (entries, total count)
        """
        conditions = []
        if actor_id:
            conditions.append(AuditLog.actor_id == actor_id)
        if action:
            conditions.append(AuditLog.action == action)
        if resource:
            conditions.append(AuditLog.resource == resource)
        if outcome:
            conditions.append(AuditLog.outcome == str(outcome))

        count_stmt = select(func.count()).select_from(AuditLog).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(AuditLog)
            .where(*conditions)
            .order_by(AuditLog.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total


def get_audit_recorder(db: DBSession, request: Request) -> AuditRecorder:
    """FastAPI dependency that builds a recorder for the current request."""
    return AuditRecorder(db, AuditContext.from_request(request))


# Type alias for dependency injection
Auditor = Annotated[AuditRecorder, Depends(get_audit_recorder)]
