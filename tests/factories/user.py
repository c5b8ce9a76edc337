"""User factories for tests."""

from uuid import uuid4

from polyfactory import Use
from polyfactory.factories.pydantic_factory import ModelFactory
from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from sidesa.core.auth import hash_password
from sidesa.core.permissions.catalog import OPERATOR
from sidesa.modules.users.models import User
from sidesa.modules.users.schemas import UserCreate


DEFAULT_PASSWORD = "rahasia123"


def _username() -> str:
    return f"user_{uuid4().hex[:8]}"


class UserFactory(SQLAlchemyFactory[User]):
    """Factory for User rows. Callers must pass ``role_id``."""

    __model__ = User
    __set_relationships__ = False

    username = Use(_username)
    email = Use(lambda: f"user-{uuid4().hex[:8]}@desa.example.id")
    full_name = Use(lambda: f"Pegawai {uuid4().hex[:4]}")
    password_hash = Use(lambda: hash_password(DEFAULT_PASSWORD))
    is_active = True
    last_login_at = None


class UserCreateFactory(ModelFactory[UserCreate]):
    """Factory for UserCreate request bodies."""

    __model__ = UserCreate

    username = Use(_username)
    email = Use(lambda: f"user-{uuid4().hex[:8]}@desa.example.id")
    full_name = Use(lambda: f"Pegawai {uuid4().hex[:4]}")
    password = DEFAULT_PASSWORD
    role = OPERATOR
