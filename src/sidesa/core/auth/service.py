"""Authentication service for login and password management."""

from datetime import UTC, datetime
from typing import Annotated

import structlog
from fastapi import Depends

from sidesa.api.dependencies import DBSession
from sidesa.config import settings
from sidesa.core.audit.service import AuditOutcome, Auditor
from sidesa.core.auth.backend import (
    create_access_token,
    hash_password,
    verify_password,
)
from sidesa.core.errors import UnauthenticatedError, ValidationError
from sidesa.modules.users.models import User
from sidesa.modules.users.repos import UserRepository
from sidesa.modules.users.schemas import TokenResponse


logger = structlog.get_logger()


class AuthService:
    """Service for authentication operations."""

    def __init__(self, db: DBSession, auditor: Auditor) -> None:
        self.db = db
        self.auditor = auditor
        self.user_repo = UserRepository(db)

    async def login(self, login: str, password: str) -> tuple[User, TokenResponse]:
        """Authenticate a user with username (or email) and password.

        Failed attempts are audited and committed before raising, so
        they survive the rollback of the failed request.

        Returns:
            Tuple of (user, token response)

        Raises:
            UnauthenticatedError: If credentials are invalid or the account is inactive
        """
        user = await self.user_repo.get_by_login(login)

        if not user or not verify_password(password, user.password_hash):
            await self._record_failed_login(user, login, "invalid_credentials")
            raise UnauthenticatedError(
                "Invalid username or password",
                error_code="invalid_credentials",
            )

        if not user.is_active:
            await self._record_failed_login(user, login, "account_inactive")
            raise UnauthenticatedError(
                "Account is deactivated",
                error_code="account_inactive",
            )

        user.last_login_at = datetime.now(UTC)
        user = await self.user_repo.update(user)

        await self.auditor.record(
            actor_id=user.id,
            action="login",
            resource="auth",
            resource_id=str(user.id),
            description=f"User {user.username} logged in",
        )
        logger.info("user_logged_in", user_id=str(user.id))

        token = TokenResponse(
            access_token=create_access_token(user.id),
            expires_in=settings.access_token_expire_minutes * 60,
        )
        return user, token

    async def change_password(
        self,
        user: User,
        current_password: str,
        new_password: str,
    ) -> None:
        """Change a user's password after verifying the current one.

        Raises:
            ValidationError: If the current password is wrong
        """
        if not verify_password(current_password, user.password_hash):
            raise ValidationError(
                "Current password is incorrect",
                errors=[
                    {"field": "current_password", "message": "Current password is incorrect"}
                ],
            )

        user.password_hash = hash_password(new_password)
        await self.user_repo.update(user)

        await self.auditor.record(
            actor_id=user.id,
            action="change_password",
            resource="users",
            resource_id=str(user.id),
            description=f"User {user.username} changed their password",
        )
        logger.info("password_changed", user_id=str(user.id))

    async def _record_failed_login(
        self, user: User | None, login: str, reason: str
    ) -> None:
        logger.warning("login_failed", login=login, reason=reason)
        await self.auditor.record(
            actor_id=user.id if user else None,
            action="login",
            resource="auth",
            description=f"Failed login for {login}",
            outcome=AuditOutcome.FAILURE,
            metadata={"login": login, "reason": reason},
            commit=True,
        )


# Type alias for dependency injection
AuthSvc = Annotated[AuthService, Depends(AuthService)]
