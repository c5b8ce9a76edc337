"""Authentication module for JWT and password handling."""

from sidesa.core.auth.backend import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from sidesa.core.auth.dependencies import CurrentUser, get_current_user
from sidesa.core.auth.schemas import TokenData


__all__ = [
    "CurrentUser",
    "TokenData",
    "create_access_token",
    "decode_token",
    "get_current_user",
    "hash_password",
    "verify_password",
]
