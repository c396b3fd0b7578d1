"""
HTTP middleware components for request/response processing.

This module provides request tagging and the last-resort error handler that
keeps every failure in the ``{error, details}`` shape.
"""

import logging
import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Middleware for unexpected errors that escaped the exception handlers."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            logger.exception(f"Unhandled error in {request.method} {request.url.path}: {e}")

            return JSONResponse(
                status_code=500,
                content={
                    "error": str(e) or "Internal server error",
                    "details": {"request_id": getattr(request.state, "request_id", None)}
                }
            )


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tags every response with a request id and its handling time."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        start_time = time.time()

        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        duration = time.time() - start_time

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        logger.debug(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {duration:.3f}s [{request_id}]"
        )
        return response
