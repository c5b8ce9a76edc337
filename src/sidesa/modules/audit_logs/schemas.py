"""Pydantic schemas for audit log responses."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AuditLogResponse(BaseModel):
    """A single audit entry."""

    id: UUID
    actor_id: UUID | None = None
    action: str
    resource: str
    resource_id: str | None = None
    description: str
    outcome: str
    ip_address: str | None = None
    request_id: str | None = None
    metadata: dict[str, Any] | None = Field(None, validation_alias="metadata_")
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AuditLogListResponse(BaseModel):
    """Paginated audit entries, newest first."""

    items: list[AuditLogResponse]
    total: int
    page: int
    page_size: int
