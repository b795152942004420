"""API middleware for the catalog API.

Provides:
- Request ID correlation
- Basic-auth credential resolution
- Error handling
"""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from catalog_api.domain.exceptions import DomainError, UnauthenticatedError
from catalog_api.infrastructure.credentials import CredentialVerifier

logger = structlog.get_logger()


# ============================================================================
# Request ID Middleware
# ============================================================================


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware to add request ID for correlation.

    Generates or extracts a request ID and adds it to:
    - Request state for access in handlers
    - Response headers for client correlation
    - Log context for tracing
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """Process request with correlation ID.

        Args:
            request: Incoming request.
            call_next: Next middleware/handler.

        Returns:
            Response with request ID header.
        """
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start_time = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=getattr(response, "status_code", 500),
                duration_ms=round(duration_ms, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id")

        response.headers[self.HEADER_NAME] = request_id
        return response


# ============================================================================
# Credential Middleware
# ============================================================================


# Paths that never look at credentials
PUBLIC_PATHS = {
    "/health",
    "/ready",
    "/docs",
    "/redoc",
    "/openapi.json",
}


class CredentialMiddleware(BaseHTTPMiddleware):
    """Resolves ``Authorization: Basic`` credentials to a user.

    Sets ``request.state.user`` to the authenticated user, or None. A
    header that does not resolve to a user leaves the request anonymous and
    records the reason on ``request.state.auth_error``; routes that need a
    user report it in their 401.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        request.state.user = None
        request.state.auth_error = None

        path = request.url.path.rstrip("/")
        if path in PUBLIC_PATHS or path.startswith("/docs") or path.startswith("/redoc"):
            return await call_next(request)

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return await call_next(request)

        verifier = CredentialVerifier(request.app.state.store)
        try:
            request.state.user = await verifier.authenticate(auth_header)
        except UnauthenticatedError as e:
            logger.info(
                "Credentials not accepted, continuing anonymously",
                path=path,
                method=request.method,
                reason=e.message,
            )
            request.state.auth_error = e.message
        except DomainError as e:
            logger.error("Credential lookup failed", error_code=e.error_code, error=e.message)
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content={
                    "error_code": e.error_code,
                    "message": e.message,
                    "details": e.details,
                    "request_id": getattr(request.state, "request_id", None),
                },
            )

        return await call_next(request)


# ============================================================================
# Error Handling Middleware
# ============================================================================


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for consistent error handling.

    Catches unhandled exceptions and returns standardized error responses.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            request_id = getattr(request.state, "request_id", None)

            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )

            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error_code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                    "details": {},
                    "request_id": request_id,
                },
            )


# ============================================================================
# Middleware Setup
# ============================================================================


def setup_middleware(app: FastAPI) -> None:
    """Configure all middleware for the application.

    Middleware is added in reverse order (last added = first executed).

    Args:
        app: FastAPI application instance.
    """
    # Error handling (innermost of the three, so request_id is already set)
    app.add_middleware(ErrorHandlerMiddleware)

    # Basic-auth credentials
    app.add_middleware(CredentialMiddleware)

    # Request ID correlation (outermost)
    app.add_middleware(RequestIdMiddleware)
