"""User service for business logic."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from sidesa.api.dependencies import DBSession
from sidesa.core.audit.service import Auditor
from sidesa.core.auth.backend import hash_password
from sidesa.core.errors import ConflictError, NotFoundError, ValidationError
from sidesa.core.permissions.models import Role
from sidesa.modules.rbac.repos import RoleRepository
from sidesa.modules.users.models import User
from sidesa.modules.users.repos import UserRepository


logger = structlog.get_logger()

USERS = "users"


class UserService:
    """Service for user management operations.

    Users are never hard deleted. Deleting a user deactivates the
    account, and nobody can deactivate their own account.
    """

    def __init__(self, db: DBSession, auditor: Auditor) -> None:
        self.db = db
        self.auditor = auditor
        self.user_repo = UserRepository(db)
        self.role_repo = RoleRepository(db)

    async def get_user(self, user_id: UUID) -> User:
        """Get a user by ID.

        Raises:
            NotFoundError: If user doesn't exist
        """
        user = await self.user_repo.get_by_id(user_id)
        if not user:
            raise NotFoundError(
                "User not found",
                resource="user",
                resource_id=str(user_id),
            )
        return user

    async def list_users(
        self,
        search: str | None = None,
        role: str | None = None,
        is_active: bool | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[User], int]:
        return await self.user_repo.search(
            search=search,
            role=role,
            is_active=is_active,
            page=page,
            page_size=page_size,
        )

    async def create_user(
        self,
        username: str,
        email: str,
        full_name: str,
        password: str,
        role: str,
        actor_id: UUID | None = None,
    ) -> User:
        """Create a new active user.

        Raises:
            ConflictError: If the username or email is taken
            ValidationError: If the role doesn't exist
        """
        await self._ensure_unique(username=username, email=email)
        assigned_role = await self._resolve_role(role)

        try:
            user = await self.user_repo.create(
                User(
                    username=username,
                    email=email,
                    full_name=full_name,
                    password_hash=hash_password(password),
                    role_id=assigned_role.id,
                    is_active=True,
                )
            )
        except IntegrityError as exc:
            raise ConflictError(
                "Username or email already in use",
                error_code="user_exists",
            ) from exc

        await self.auditor.record(
            actor_id=actor_id,
            action="create_user",
            resource=USERS,
            resource_id=str(user.id),
            description=f"Created user: {user.username}",
            metadata={"role": assigned_role.name},
        )
        logger.info("user_created", user_id=str(user.id), role=assigned_role.name)
        return user

    async def update_user(
        self,
        user_id: UUID,
        email: str | None = None,
        full_name: str | None = None,
        role: str | None = None,
        actor_id: UUID | None = None,
    ) -> User:
        """Update a user's profile or role. ``None`` leaves a field unchanged.

        Raises:
            NotFoundError: If user doesn't exist
            ConflictError: If the email is taken by another user
            ValidationError: If the role doesn't exist
        """
        user = await self.get_user(user_id)
        changes: dict[str, str] = {}

        if email is not None and email != user.email:
            await self._ensure_unique(email=email, exclude_id=user.id)
            user.email = email
            changes["email"] = email

        if full_name is not None and full_name != user.full_name:
            user.full_name = full_name
            changes["full_name"] = full_name

        if role is not None and role != user.role.name:
            assigned_role = await self._resolve_role(role)
            user.role_id = assigned_role.id
            changes["role"] = assigned_role.name

        if not changes:
            return user

        try:
            user = await self.user_repo.update(user)
        except IntegrityError as exc:
            raise ConflictError(
                "Email already in use",
                error_code="user_exists",
            ) from exc

        await self.auditor.record(
            actor_id=actor_id,
            action="update_user",
            resource=USERS,
            resource_id=str(user.id),
            description=f"Updated user: {user.username}",
            metadata={"changes": changes},
        )
        logger.info("user_updated", user_id=str(user.id), fields=sorted(changes))
        return user

    async def set_status(
        self,
        user_id: UUID,
        is_active: bool,
        actor_id: UUID | None = None,
    ) -> User:
        """Activate or deactivate a user.

        Raises:
            NotFoundError: If user doesn't exist
            ValidationError: If a user tries to deactivate their own account
        """
        if not is_active and actor_id == user_id:
            raise ValidationError(
                "You cannot deactivate your own account",
                error_code="self_deactivation",
            )

        user = await self.get_user(user_id)
        if user.is_active == is_active:
            return user

        user.is_active = is_active
        user = await self.user_repo.update(user)

        action = "activate_user" if is_active else "deactivate_user"
        await self.auditor.record(
            actor_id=actor_id,
            action=action,
            resource=USERS,
            resource_id=str(user.id),
            description=f"{'Activated' if is_active else 'Deactivated'} user: {user.username}",
        )
        logger.info(action, user_id=str(user.id))
        return user

    async def deactivate_user(self, user_id: UUID, actor_id: UUID | None = None) -> User:
        """Soft delete a user by deactivating the account."""
        if actor_id == user_id:
            raise ValidationError(
                "You cannot delete your own account",
                error_code="self_deletion",
            )
        return await self.set_status(user_id, is_active=False, actor_id=actor_id)

    async def _ensure_unique(
        self,
        username: str | None = None,
        email: str | None = None,
        exclude_id: UUID | None = None,
    ) -> None:
        existing = await self.user_repo.find_conflicting(
            username=username,
            email=email,
            exclude_id=exclude_id,
        )
        if existing:
            raise ConflictError(
                "Username or email already in use",
                error_code="user_exists",
            )

    async def _resolve_role(self, name: str) -> Role:
        role = await self.role_repo.get_by_name(name)
        if not role:
            raise ValidationError(
                f"Role '{name}' not found",
                errors=[{"field": "role", "message": f"Unknown role: {name}"}],
            )
        return role


# Type alias for dependency injection
UserSvc = Annotated[UserService, Depends(UserService)]
