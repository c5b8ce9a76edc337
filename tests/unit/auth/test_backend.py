"""Unit tests for password hashing and JWT handling."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from jose import jwt

from sidesa.config import settings
from sidesa.core.auth.backend import (
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)


pytestmark = pytest.mark.unit


class TestPasswordHashing:
    """Tests for password hashing functions."""

    def test_hash_is_not_plaintext(self):
        hashed = hash_password("rahasia123")

        assert hashed != "rahasia123"
        assert hashed.startswith("$2b$")

    def test_verify_correct_password(self):
        hashed = hash_password("rahasia123")

        assert verify_password("rahasia123", hashed) is True

    def test_verify_wrong_password(self):
        hashed = hash_password("rahasia123")

        assert verify_password("salah", hashed) is False

    def test_same_password_different_hashes(self):
        assert hash_password("rahasia123") != hash_password("rahasia123")


class TestAccessTokens:
    """Tests for JWT creation and decoding."""

    def test_round_trip(self):
        user_id = uuid4()

        data = decode_token(create_access_token(user_id))

        assert data is not None
        assert data.user_id == user_id
        assert data.type == "access"
        assert data.jti
        assert data.exp > datetime.now(UTC)

    def test_custom_expiry(self):
        token = create_access_token(uuid4(), expires_delta=timedelta(minutes=5))

        data = decode_token(token)

        assert data is not None
        assert data.exp <= datetime.now(UTC) + timedelta(minutes=5, seconds=1)

    def test_additional_claims(self):
        token = create_access_token(uuid4(), additional_claims={"scope": "cli"})

        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.jwt_algorithm]
        )

        assert payload["scope"] == "cli"

    def test_expired_token_is_rejected(self):
        token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-10))

        assert decode_token(token) is None

    def test_garbage_token_is_rejected(self):
        assert decode_token("not-a-jwt") is None

    def test_wrong_signature_is_rejected(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "exp": datetime.now(UTC) + timedelta(minutes=5)},
            "another-secret-key-that-is-long-enough-0000",
            algorithm="HS256",
        )

        assert decode_token(token) is None

    def test_non_uuid_subject_is_rejected(self):
        token = jwt.encode(
            {"sub": "budi", "exp": datetime.now(UTC) + timedelta(minutes=5)},
            settings.secret_key,
            algorithm=settings.jwt_algorithm,
        )

        assert decode_token(token) is None
