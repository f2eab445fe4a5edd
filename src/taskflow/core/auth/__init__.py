"""Authentication: token codec, authentication gate and password handling."""

from taskflow.core.auth.backend import (
    ExpiredTokenError,
    InvalidTokenError,
    TokenError,
    create_access_token,
    decode_token,
    hash_password,
    verify_password,
)
from taskflow.core.auth.dependencies import (
    CurrentUser,
    CurrentUserId,
    get_current_user,
    get_current_user_id,
)
from taskflow.core.auth.middleware import AuthenticationGate
from taskflow.core.auth.schemas import IdentityClaim


__all__ = [
    "AuthenticationGate",
    "CurrentUser",
    "CurrentUserId",
    "ExpiredTokenError",
    "IdentityClaim",
    "InvalidTokenError",
    "TokenError",
    "create_access_token",
    "decode_token",
    "get_current_user",
    "get_current_user_id",
    "hash_password",
    "verify_password",
]
