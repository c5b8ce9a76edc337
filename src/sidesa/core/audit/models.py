"""Audit log database model.

Stores audit entries for tracking who did what, when, and with
which outcome (including permission denials).
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from sidesa.core.constants import (
    MAX_AUDIT_ACTION_LENGTH,
    MAX_IPV6_LENGTH,
    MAX_PERMISSION_RESOURCE_LENGTH,
    MAX_REQUEST_ID_LENGTH,
)
from sidesa.core.database.base import Base, UUIDMixin


class AuditLog(Base, UUIDMixin):
    """Audit log entry for tracking changes and decisions.

    Attributes:
        actor_id: The user who performed the action (nullable for system actions)
        action: Type of action (create_role, delete_user, permission_denied, ...)
        resource: Resource category affected (roles, users, citizens, ...)
        resource_id: Identifier of the affected record
        description: Human-readable summary
        outcome: success, denied or failure
        ip_address: Client IP address
        request_id: Correlation ID for request tracing
        metadata_: Additional context about the action
        created_at: When the action occurred
    """

    __tablename__ = "audit_logs"

    actor_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    action: Mapped[str] = mapped_column(
        String(MAX_AUDIT_ACTION_LENGTH),
        nullable=False,
        index=True,
    )
    resource: Mapped[str] = mapped_column(
        String(MAX_PERMISSION_RESOURCE_LENGTH),
        nullable=False,
        index=True,
    )
    resource_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
    )
    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    outcome: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
    )

    # Request context
    ip_address: Mapped[str | None] = mapped_column(
        String(MAX_IPV6_LENGTH),
        nullable=True,
    )
    request_id: Mapped[str | None] = mapped_column(
        String(MAX_REQUEST_ID_LENGTH),
        nullable=True,
        index=True,
    )

    metadata_: Mapped[dict[str, Any] | None] = mapped_column(
        "metadata",  # Column name in database
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, action={self.action}, "
            f"resource={self.resource}, outcome={self.outcome})>"
        )
