"""Permission checking logic.

The gate answers one question before every protected operation: may
this user perform ``action`` on ``resource``? The answer comes from the
user's role as currently stored, read fresh for every check, and is
limited to pairs the static catalog knows about.
"""

from typing import TYPE_CHECKING
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sidesa.core.audit.service import AuditOutcome, AuditRecorder
from sidesa.core.errors import (
    PermissionDeniedError,
    UnauthenticatedError,
    UnavailableError,
)
from sidesa.core.permissions import catalog
from sidesa.core.permissions.catalog import CatalogPermission
from sidesa.core.permissions.models import Permission, role_permissions


if TYPE_CHECKING:
    from sidesa.modules.users.models import User


logger = structlog.get_logger()


class PermissionGate:
    """Decides whether a user may perform an action on a resource.

    Matching is exact on the (resource, action) pair. There are no
    wildcards, no hierarchy and no role that bypasses the check.
    """

    def __init__(
        self,
        session: AsyncSession,
        recorder: AuditRecorder | None = None,
    ) -> None:
        self.session = session
        self.recorder = recorder

    async def get_granted(self, role_id: UUID) -> frozenset[tuple[str, str]]:
        """Load the (resource, action) pairs granted to a role.

        Raises:
            UnavailableError: If the permission store cannot be read
        """
        stmt = (
            select(Permission.resource, Permission.action)
            .join(role_permissions, role_permissions.c.permission_id == Permission.id)
            .where(role_permissions.c.role_id == role_id)
        )
        try:
            result = await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            logger.exception("permission_lookup_failed", role_id=str(role_id))
            raise UnavailableError("Permission store unavailable") from exc

        return frozenset((resource, action) for resource, action in result.all())

    async def is_allowed(
        self,
        user: "User | None",
        resource: str,
        action: str,
    ) -> bool:
        """Check a permission without side effects.

        Returns:
            True only for an active user whose role grants a catalog pair
        """
        if user is None or not user.is_active:
            return False
        if not catalog.is_known(resource, action):
            return False

        granted = await self.get_granted(user.role_id)
        return (resource, action) in granted

    async def require_permission(
        self,
        user: "User | None",
        resource: str,
        action: str,
    ) -> None:
        """Raise unless the user may perform ``action`` on ``resource``.

        Denials are logged and written to the audit trail before raising.

        Raises:
            UnauthenticatedError: If there is no user
            PermissionDeniedError: If the permission is not granted
            UnavailableError: If the permission store cannot be read
        """
        if user is None:
            raise UnauthenticatedError()

        if await self.is_allowed(user, resource, action):
            return

        required = f"{resource}.{action}"
        reason = "inactive_user" if not user.is_active else "not_granted"

        logger.warning(
            "permission_denied",
            user_id=str(user.id),
            required_permission=required,
            reason=reason,
        )

        if self.recorder is not None:
            await self.recorder.record(
                actor_id=user.id,
                action="permission_denied",
                resource=resource,
                description=f"Akses ditolak: {required}",
                outcome=AuditOutcome.DENIED,
                metadata={"required_permission": required, "reason": reason},
                commit=True,
            )

        raise PermissionDeniedError(
            f"Missing required permission: {required}",
            details={"required_permission": required},
        )

    async def effective_permissions(self, user: "User") -> list[CatalogPermission]:
        """Return the catalog permissions the user's role grants, in catalog order."""
        granted = await self.get_granted(user.role_id)
        return [p for p in catalog.list_permissions() if p.key in granted]

