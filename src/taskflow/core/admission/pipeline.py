"""Request admission pipeline.

Every inbound request passes an ordered list of admission stages before it
reaches a route handler. A stage either lets the request through (optionally
contributing response headers) or rejects it with a finished response, in
which case no later stage and no handler runs.

Stages share one contract::

    async def admit(request) -> Admission

and are run by ``AdmissionPipeline``, hosted in the ASGI stack by
``AdmissionMiddleware``.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response


if TYPE_CHECKING:
    from starlette.types import ASGIApp


logger = structlog.get_logger()


@dataclass(frozen=True)
class Admission:
    """Outcome of a single admission stage.

    Attributes:
        response: Finished response when the stage rejects the request
        headers: Headers to attach to whatever response is finally sent
    """

    response: Response | None = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def admitted(self) -> bool:
        """Whether the request may continue down the pipeline."""
        return self.response is None

    @classmethod
    def proceed(cls, headers: dict[str, str] | None = None) -> "Admission":
        """Let the request continue."""
        return cls(headers=dict(headers or {}))

    @classmethod
    def reject(
        cls, response: Response, headers: dict[str, str] | None = None
    ) -> "Admission":
        """Stop the request with ``response``."""
        return cls(response=response, headers=dict(headers or {}))


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the small ``{"error": ...}`` body used by admission rejections."""
    return JSONResponse(status_code=status_code, content={"error": message})


def _path_matches(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix.rstrip("/") + "/")


class AdmissionStage(ABC):
    """Base class for one gate in the admission pipeline.

    Args:
        include_prefixes: Path prefixes the stage applies to. Empty means
            every path that reaches the pipeline.
    """

    name: ClassVar[str] = "stage"

    def __init__(self, include_prefixes: Sequence[str] | None = None) -> None:
        self.include_prefixes = tuple(include_prefixes or ())

    def applies_to(self, path: str) -> bool:
        """Check whether this stage guards ``path``."""
        if not self.include_prefixes:
            return True
        return any(_path_matches(path, prefix) for prefix in self.include_prefixes)

    @abstractmethod
    async def admit(self, request: Request) -> Admission:
        """Decide whether ``request`` may proceed."""


class AdmissionPipeline:
    """Runs admission stages in order (chain of responsibility).

    Headers contributed by stages are merged onto the final response, be it
    the handler's response or a rejection. A rejecting stage's own headers
    are applied last and win over earlier ones.
    """

    def __init__(self, stages: Iterable[AdmissionStage]) -> None:
        self.stages = list(stages)

    async def run(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Admit ``request`` through every applicable stage, then call the handler.

        Args:
            request: The incoming request
            call_next: The downstream handler

        Returns:
            The rejection response of the first failing stage, or the
            downstream response when every stage admits the request
        """
        path = request.url.path
        headers: dict[str, str] = {}
        response: Response | None = None

        for stage in self.stages:
            if not stage.applies_to(path):
                continue

            admission = await stage.admit(request)
            headers.update(admission.headers)

            if not admission.admitted:
                logger.debug(
                    "admission_rejected",
                    stage=stage.name,
                    path=path,
                    status_code=admission.response.status_code,  # type: ignore[union-attr]
                )
                response = admission.response
                break

        if response is None:
            response = await call_next(request)

        for name, value in headers.items():
            response.headers[name] = value

        return response


class AdmissionMiddleware(BaseHTTPMiddleware):
    """Hosts an ``AdmissionPipeline`` in the ASGI middleware stack.

    Paths in ``exclude_paths`` bypass admission entirely.
    """

    EXCLUDED_PATHS: ClassVar[tuple[str, ...]] = (
        "/health/live",
        "/health/ready",
        "/docs",
        "/redoc",
        "/openapi.json",
    )

    def __init__(
        self,
        app: "ASGIApp",
        pipeline: AdmissionPipeline,
        exclude_paths: Sequence[str] | None = None,
    ) -> None:
        super().__init__(app)
        self.pipeline = pipeline
        self.exclude_paths = tuple(
            self.EXCLUDED_PATHS if exclude_paths is None else exclude_paths
        )

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Run the admission pipeline unless the path is excluded."""
        if request.url.path in self.exclude_paths:
            return await call_next(request)
        return await self.pipeline.run(request, call_next)
