"""
Credentials and Access Tokens

Password hashing with bcrypt and HS256 access tokens with PyJWT.

Token verification is synchronous and happens before any use case runs: it
returns the authenticated customer or raises an authentication failure.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt

from storefront.config import get_settings
from storefront.errors import AuthenticationError, TokenRejectedError


@dataclass(frozen=True)
class AuthenticatedCustomer:
    """Identity carried by a verified access token"""
    customer_id: int
    email: str


def hash_password(password: str, rounds: Optional[int] = None) -> str:
    salt = bcrypt.gensalt(rounds or get_settings().security.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def create_access_token(customer_id: int, email: str) -> str:
    """Issue a signed token valid for ``jwt_expiration_hours``."""
    security = get_settings().security
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(customer_id),
        "email": email,
        "iat": now,
        "exp": now + timedelta(hours=security.jwt_expiration_hours),
    }
    return jwt.encode(
        payload,
        security.jwt_secret_key.get_secret_value(),
        algorithm=security.jwt_algorithm,
    )


def verify_access_token(token: Optional[str]) -> AuthenticatedCustomer:
    """
    Verify a bearer token.

    Raises:
        AuthenticationError: No token presented (401)
        TokenRejectedError: Bad signature, expired or malformed token (403)
    """
    if not token:
        raise AuthenticationError("Authentication required")

    security = get_settings().security
    try:
        claims = jwt.decode(
            token,
            security.jwt_secret_key.get_secret_value(),
            algorithms=[security.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
        return AuthenticatedCustomer(customer_id=int(claims["sub"]), email=claims.get("email", ""))
    except (jwt.InvalidTokenError, ValueError) as e:
        raise TokenRejectedError("Invalid or expired token") from e


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
