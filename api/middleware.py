"""Request-scoped middleware for API requests."""

import logging
from typing import Callable
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from api.base import error_response, ErrorCodes

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Assigns a request ID to every request.

    An incoming X-Request-ID header is kept so a caller can trace a request
    across services; otherwise a new UUID is generated.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class SessionGateMiddleware(BaseHTTPMiddleware):
    """Rejects requests the host application has not authenticated.

    Authentication itself lives outside the ledger. The host supplies
    is_authenticated(request) and this middleware only enforces its answer.

    Public paths bypass the gate entirely.
    """

    PUBLIC_PATHS = [
        "/health",
        "/docs",
        "/openapi.json",
    ]

    def __init__(self, app, is_authenticated: Callable[[Request], bool]):
        super().__init__(app)
        self._is_authenticated = is_authenticated

    def _is_public_path(self, path: str) -> bool:
        """Check if path is in public paths list."""
        for public_path in self.PUBLIC_PATHS:
            if path == public_path or path.startswith(public_path + "/"):
                return True
        return False

    async def dispatch(self, request: Request, call_next):
        """Process request through middleware."""
        if self._is_public_path(request.url.path):
            return await call_next(request)

        if not self._is_authenticated(request):
            logger.info(f"Unauthenticated request to {request.url.path}")
            return JSONResponse(
                status_code=401,
                content=error_response(
                    ErrorCodes.NOT_AUTHENTICATED,
                    "Authentication required",
                    getattr(request.state, "request_id", None),
                ).model_dump(mode="json"),
            )

        return await call_next(request)
