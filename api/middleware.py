"""Request-scoped middleware for API requests."""

import logging
from uuid import UUID, uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes
from utils.studio_context import clear_current_studio_id, set_current_studio_id

logger = logging.getLogger(__name__)

STUDIO_HEADER = "X-Studio-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Assigns a unique request ID to every request."""

    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class StudioContextMiddleware(BaseHTTPMiddleware):
    """
    Scopes every /api request to the studio named in the X-Studio-ID header.

    1. Reads and validates the header
    2. Sets the studio in request.state and the studio context (for RLS)
    3. Clears the context after the request completes

    Public paths bypass the check entirely.
    """

    PUBLIC_PATHS = [
        "/health",
        "/docs",
        "/openapi.json",
    ]

    def _is_public_path(self, path: str) -> bool:
        return any(path == p or path.startswith(p) for p in self.PUBLIC_PATHS)

    def _reject(self, request: Request, message: str) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=error_response(
                ErrorCodes.STUDIO_REQUIRED,
                message,
                getattr(request.state, "request_id", None),
            ).model_dump(mode="json"),
        )

    async def dispatch(self, request: Request, call_next):
        if self._is_public_path(request.url.path):
            return await call_next(request)

        raw = request.headers.get(STUDIO_HEADER)
        if not raw:
            return self._reject(request, f"{STUDIO_HEADER} header is required")

        try:
            studio_id = UUID(raw)
        except ValueError:
            logger.warning("Rejected request with malformed studio id %r", raw)
            return self._reject(request, f"{STUDIO_HEADER} must be a UUID")

        set_current_studio_id(studio_id)
        request.state.studio_id = studio_id
        try:
            return await call_next(request)
        finally:
            clear_current_studio_id()
