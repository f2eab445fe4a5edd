"""Rate limiting stage for the admission pipeline.

Limits are applied per client network address, so the stage can run
before authentication.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, ClassVar

import structlog
from starlette import status
from starlette.requests import Request

from taskflow.core.admission import Admission, AdmissionStage, error_response
from taskflow.core.errors import ServiceUnavailableError
from taskflow.core.rate_limit.backend import FixedWindowRateLimiter


if TYPE_CHECKING:
    from taskflow.config import Settings


logger = structlog.get_logger()

LIMIT_HEADER = "X-RateLimit-Limit"
REMAINING_HEADER = "X-RateLimit-Remaining"
STORE_UNAVAILABLE_MESSAGE = "service unavailable"


class RateLimitStage(AdmissionStage):
    """Admission stage enforcing a request budget per client address.

    Admitted requests carry ``X-RateLimit-Limit`` and
    ``X-RateLimit-Remaining``. Over-limit requests get 429 with
    ``X-RateLimit-Remaining: 0``. If the counter store cannot be reached
    every request is refused with 503. A disabled stage touches neither
    the store nor the headers.
    """

    name: ClassVar[str] = "rate_limit"

    def __init__(
        self,
        limiter: FixedWindowRateLimiter,
        *,
        enabled: bool = True,
        limit: int = 100,
        window: int = 60,
        error_message: str = "Too many requests",
        include_prefixes: Sequence[str] | None = None,
    ) -> None:
        super().__init__(include_prefixes)
        self.limiter = limiter
        self.enabled = enabled
        self.limit = limit
        self.window = window
        self.error_message = error_message

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        limiter: FixedWindowRateLimiter | None = None,
    ) -> "RateLimitStage":
        """Build the stage from application settings."""
        return cls(
            limiter or FixedWindowRateLimiter(timeout=settings.rate_limit_store_timeout),
            enabled=settings.rate_limit_enabled,
            limit=settings.rate_limit_requests,
            window=settings.rate_limit_window,
            error_message=settings.rate_limit_error_message,
        )

    async def admit(self, request: Request) -> Admission:
        """Count the request against its client's window."""
        if not self.enabled:
            return Admission.proceed()

        client_ip = self._get_identifier(request)

        try:
            result = await self.limiter.is_allowed(
                identifier=client_ip,
                limit=self.limit,
                window=self.window,
            )
        except ServiceUnavailableError as exc:
            logger.error(
                "rate_limit_store_unavailable",
                client_ip=client_ip,
                path=request.url.path,
                error=repr(exc.__cause__),
            )
            return Admission.reject(
                error_response(
                    status.HTTP_503_SERVICE_UNAVAILABLE, STORE_UNAVAILABLE_MESSAGE
                )
            )

        headers = {
            LIMIT_HEADER: str(result.limit),
            REMAINING_HEADER: str(result.remaining),
        }

        if not result.allowed:
            logger.info(
                "rate_limit_exceeded",
                client_ip=client_ip,
                path=request.url.path,
                count=result.count,
                limit=result.limit,
            )
            return Admission.reject(
                error_response(status.HTTP_429_TOO_MANY_REQUESTS, self.error_message),
                headers=headers,
            )

        return Admission.proceed(headers)

    @staticmethod
    def _get_identifier(request: Request) -> str:
        """Use the transport peer address; forwarding headers are not trusted."""
        return request.client.host if request.client else "unknown"
