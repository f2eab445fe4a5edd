"""Authentication gate for protected routes.

The gate runs inside the admission pipeline. It reads the bearer token,
verifies it with the token codec and stores the caller's identity in
``request.state.user_id`` for route handlers.
"""

from collections.abc import Sequence
from typing import ClassVar

import structlog
from starlette import status
from starlette.requests import Request

from taskflow.core.admission import Admission, AdmissionStage, error_response
from taskflow.core.auth.backend import TokenError, decode_token


logger = structlog.get_logger()

BEARER_PREFIX = "Bearer "
USER_ID_STATE_KEY = "user_id"

MISSING_CREDENTIALS_MESSAGE = "missing or invalid token"
UNAUTHORIZED_MESSAGE = "unauthorized"

PROTECTED_PREFIXES: tuple[str, ...] = (
    "/api/v1/tasks",
    "/api/v1/auth/me",
)


class AuthenticationGate(AdmissionStage):
    """Admission stage that requires a valid ``Authorization: Bearer`` token.

    A missing header or a non-Bearer scheme gets its own message; every
    codec failure (bad signature, expiry, malformed token) collapses into
    one generic ``unauthorized`` answer.
    """

    name: ClassVar[str] = "authentication"

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        include_prefixes: Sequence[str] | None = PROTECTED_PREFIXES,
    ) -> None:
        super().__init__(include_prefixes)
        self.secret = secret
        self.algorithm = algorithm

    async def admit(self, request: Request) -> Admission:
        """Verify the bearer token and attach the caller identity."""
        auth_header = request.headers.get("Authorization")
        if not auth_header or not auth_header.startswith(BEARER_PREFIX):
            logger.info("auth_credentials_missing", path=request.url.path)
            return Admission.reject(
                error_response(status.HTTP_401_UNAUTHORIZED, MISSING_CREDENTIALS_MESSAGE)
            )

        token = auth_header[len(BEARER_PREFIX) :]
        try:
            claim = decode_token(token, self.secret, self.algorithm)
        except TokenError as exc:
            logger.info(
                "auth_token_rejected",
                path=request.url.path,
                reason=type(exc).__name__,
            )
            return Admission.reject(
                error_response(status.HTTP_401_UNAUTHORIZED, UNAUTHORIZED_MESSAGE)
            )

        setattr(request.state, USER_ID_STATE_KEY, claim.subject)
        structlog.contextvars.bind_contextvars(user_id=claim.subject)

        return Admission.proceed()
