"""
Unit Tests - Credentials and Access Tokens
"""
from datetime import datetime, timedelta, timezone

import jwt
import pytest

from storefront.config import get_settings
from storefront.errors import AuthenticationError, TokenRejectedError
from storefront.security import (
    bearer_token,
    create_access_token,
    hash_password,
    verify_access_token,
    verify_password,
)


class TestPasswords:
    """Tests for bcrypt hashing"""

    def test_hash_and_verify(self):
        password_hash = hash_password("secret-pass", rounds=4)

        assert password_hash != "secret-pass"
        assert verify_password("secret-pass", password_hash)
        assert not verify_password("wrong-pass", password_hash)


class TestAccessTokens:
    """Tests for token issue and verification"""

    def test_round_trip(self):
        token = create_access_token(7, "anna@example.com")

        customer = verify_access_token(token)

        assert customer.customer_id == 7
        assert customer.email == "anna@example.com"

    def test_missing_token_is_401(self):
        with pytest.raises(AuthenticationError) as exc_info:
            verify_access_token(None)

        assert not isinstance(exc_info.value, TokenRejectedError)
        assert exc_info.value.status_code == 401

    def test_garbage_token_is_403(self):
        with pytest.raises(TokenRejectedError) as exc_info:
            verify_access_token("not.a.token")

        assert exc_info.value.status_code == 403

    def test_wrong_signature(self):
        token = jwt.encode(
            {"sub": "7", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "some-other-secret",
            algorithm="HS256",
        )

        with pytest.raises(TokenRejectedError):
            verify_access_token(token)

    def test_expired_token(self):
        security = get_settings().security
        token = jwt.encode(
            {"sub": "7", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            security.jwt_secret_key.get_secret_value(),
            algorithm=security.jwt_algorithm,
        )

        with pytest.raises(TokenRejectedError):
            verify_access_token(token)

    def test_token_without_subject(self):
        security = get_settings().security
        token = jwt.encode(
            {"exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            security.jwt_secret_key.get_secret_value(),
            algorithm=security.jwt_algorithm,
        )

        with pytest.raises(TokenRejectedError):
            verify_access_token(token)


class TestBearerToken:
    """Tests for Authorization header parsing"""

    @pytest.mark.parametrize("header,expected", [
        ("Bearer abc", "abc"),
        ("bearer abc", "abc"),
        ("Basic abc", None),
        ("Bearer ", None),
        ("", None),
        (None, None),
    ])
    def test_extracts_token(self, header, expected):
        assert bearer_token(header) == expected
