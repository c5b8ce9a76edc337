"""Pytest configuration and shared fixtures."""

import os


# Settings are read at import time, so the environment is set first
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SECRET_KEY", "test-secret-key-that-is-long-enough-1234567890")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from sidesa.core.audit.models import AuditLog  # noqa: E402, F401
from sidesa.core.audit.service import AuditRecorder  # noqa: E402
from sidesa.core.auth.backend import create_access_token  # noqa: E402
from sidesa.core.database import Base, get_db  # noqa: E402
from sidesa.core.permissions.catalog import (  # noqa: E402
    ADMIN_DESA,
    OPERATOR,
    SUPER_ADMIN,
    VIEWER,
)
from sidesa.core.permissions.models import Permission, Role  # noqa: E402, F401
from sidesa.main import create_app  # noqa: E402
from sidesa.modules.rbac.services import RoleService  # noqa: E402
from sidesa.modules.users.models import User  # noqa: E402
from tests.factories.user import UserFactory  # noqa: E402


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

MakeUser = Callable[..., Awaitable[User]]


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine with the schema in place.

    pysqlite's own transaction handling is switched off so that
    SAVEPOINT works, and foreign keys are enforced.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, _connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def db(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide the database session shared by the test and the app."""
    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session


@pytest.fixture
async def app(db: AsyncSession):
    """Create test application instance."""
    application = create_app()

    # Same commit/rollback behaviour as get_db, on the test session
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    application.dependency_overrides[get_db] = override_get_db

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Provide async HTTP client for API testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


# ============================================================
# Role and User Fixtures
# ============================================================


@pytest.fixture
async def roles(db: AsyncSession) -> dict[str, Role]:
    """Seed the permission catalog and the system roles.

    Returns:
        System roles keyed by name
    """
    seeded = await RoleService(db, AuditRecorder(db)).seed_system_roles()
    await db.commit()
    return {role.name: role for role in seeded}


@pytest.fixture
async def staff_role(db: AsyncSession, roles: dict[str, Role]) -> Role:
    """A custom role granting citizens.read and citizens.create only."""
    role = await RoleService(db, AuditRecorder(db)).create_role(
        name="Staff",
        description="Staf pelayanan",
        permission_ids=["citizens.read", "citizens.create"],
    )
    await db.commit()
    return role


@pytest.fixture
def make_user(db: AsyncSession) -> MakeUser:
    """Return a coroutine that persists a user holding the given role."""

    async def _make_user(role: Role, **kwargs) -> User:
        user = UserFactory.build(role_id=role.id, **kwargs)
        db.add(user)
        await db.commit()
        await db.refresh(user)
        return user

    return _make_user


@pytest.fixture
async def super_admin(make_user: MakeUser, roles: dict[str, Role]) -> User:
    return await make_user(roles[SUPER_ADMIN], username="superadmin")


@pytest.fixture
async def admin_desa(make_user: MakeUser, roles: dict[str, Role]) -> User:
    return await make_user(roles[ADMIN_DESA], username="admindesa")


@pytest.fixture
async def operator(make_user: MakeUser, roles: dict[str, Role]) -> User:
    return await make_user(roles[OPERATOR], username="operator")


@pytest.fixture
async def viewer(make_user: MakeUser, roles: dict[str, Role]) -> User:
    return await make_user(roles[VIEWER], username="viewer")


def auth_headers(user: User) -> dict[str, str]:
    """Build an Authorization header with a valid access token for ``user``."""
    token = create_access_token(user_id=user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(super_admin: User) -> dict[str, str]:
    return auth_headers(super_admin)
