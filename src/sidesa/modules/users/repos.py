"""User repository for database operations."""

from uuid import UUID

from sqlalchemy import func, or_, select

from sidesa.api.dependencies import DBSession
from sidesa.core.permissions.models import Role
from sidesa.modules.users.models import User


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, user: User) -> User:
        """Create a new user.

        Args:
            user: User instance to create

        Returns:
            The created user with ID and timestamps populated
        """
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: UUID) -> User | None:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> User | None:
        result = await self.session.execute(
            select(User).where(User.username == username)
        )
        return result.scalar_one_or_none()

    async def get_by_login(self, login: str) -> User | None:
        """Get a user by username or email address."""
        result = await self.session.execute(
            select(User).where(or_(User.username == login, User.email == login))
        )
        return result.scalars().first()

    async def find_conflicting(
        self,
        username: str | None = None,
        email: str | None = None,
        exclude_id: UUID | None = None,
    ) -> User | None:
        """Find another user already holding the given username or email."""
        conditions = []
        if username:
            conditions.append(User.username == username)
        if email:
            conditions.append(User.email == email)
        if not conditions:
            return None

        stmt = select(User).where(or_(*conditions))
        if exclude_id:
            stmt = stmt.where(User.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def search(
        self,
        search: str | None = None,
        role: str | None = None,
        is_active: bool | None = None,
        page: int = 1,
        page_size: int = 10,
    ) -> tuple[list[User], int]:
        """List users with filtering and pagination, newest first.

        Args:
            search: Case-insensitive match on username, email or full name
            role: Exact role name
            is_active: Filter on account status
            page: Page number (1-indexed)
            page_size: Number of items per page

        Returns:
            Tuple of (users list, total count)
        """
        conditions = []
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(
                or_(
                    func.lower(User.username).like(pattern),
                    func.lower(User.email).like(pattern),
                    func.lower(User.full_name).like(pattern),
                )
            )
        if role:
            conditions.append(User.role_id.in_(select(Role.id).where(Role.name == role)))
        if is_active is not None:
            conditions.append(User.is_active == is_active)

        count_stmt = select(func.count()).select_from(User).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        offset = (page - 1) * page_size
        stmt = (
            select(User)
            .where(*conditions)
            .order_by(User.created_at.desc(), User.username)
            .offset(offset)
            .limit(page_size)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def update(self, user: User) -> User:
        """Flush pending changes and reload server-generated columns."""
        await self.session.flush()
        await self.session.refresh(user)
        return user

