"""Authentication backend for JWT and password handling.

This module provides core authentication utilities including:
- Password hashing with bcrypt
- Access token creation
- Access token verification (the token codec used by the auth gate)
"""

from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from taskflow.config import settings
from taskflow.core.auth.schemas import IdentityClaim
from taskflow.core.constants import BCRYPT_ROUNDS


pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=BCRYPT_ROUNDS,
)


class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidTokenError(TokenError):
    """Token is malformed, badly signed, uses another algorithm or lacks a subject."""


class ExpiredTokenError(TokenError):
    """Token signature is valid but its expiry is in the past."""


# ============================================================
# Password Utilities
# ============================================================


def hash_password(password: str) -> str:
    """Hash a password using bcrypt.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash of the password
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash.

    Args:
        plain_password: Plain text password to verify
        hashed_password: Bcrypt hash to verify against

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


# ============================================================
# JWT Token Utilities
# ============================================================


def create_access_token(
    subject: str | UUID,
    expires_delta: timedelta | None = None,
    additional_claims: dict[str, Any] | None = None,
    secret: str | None = None,
    algorithm: str | None = None,
) -> str:
    """Create a signed JWT access token.

    Args:
        subject: Identifier of the user the token is issued for
        expires_delta: Optional custom lifetime (may be negative in tests)
        additional_claims: Optional extra claims to include
        secret: Signing secret (default: ``settings.secret_key``)
        algorithm: Signing algorithm (default: ``settings.jwt_algorithm``)

    Returns:
        Encoded JWT access token
    """
    now = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    to_encode: dict[str, Any] = {
        "sub": str(subject),
        "iat": now,
        "exp": now + expires_delta,
    }
    if additional_claims:
        to_encode.update(additional_claims)

    return jwt.encode(
        to_encode,
        secret or settings.secret_key,
        algorithm=algorithm or settings.jwt_algorithm,
    )


def decode_token(
    token: str,
    secret: str | None = None,
    algorithm: str | None = None,
) -> IdentityClaim:
    """Verify a JWT and extract the caller's identity.

    Only ``algorithm`` is accepted; a token whose header names any other
    algorithm (``none`` included) is rejected before its signature is used.

    Args:
        token: The encoded JWT
        secret: Verification secret (default: ``settings.secret_key``)
        algorithm: Expected algorithm (default: ``settings.jwt_algorithm``)

    Returns:
        The decoded identity claim

    Raises:
        ExpiredTokenError: If the signature is valid but the token expired
        InvalidTokenError: For any other defect
    """
    try:
        payload = jwt.decode(
            token,
            secret or settings.secret_key,
            algorithms=[algorithm or settings.jwt_algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except ExpiredSignatureError as exc:
        raise ExpiredTokenError("token has expired") from exc
    except (JWTError, ValueError, TypeError) as exc:
        raise InvalidTokenError("token could not be verified") from exc

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject.strip():
        raise InvalidTokenError("token has no subject")

    try:
        expires_at = datetime.fromtimestamp(payload["exp"], tz=UTC)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidTokenError("token expiry is not a timestamp") from exc

    return IdentityClaim(subject=subject, expires_at=expires_at)
