"""
Request logging middleware.
"""

import logging
import time
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ..utils.logging_config import request_id_var

logger = logging.getLogger(__name__)

QUIET_PATHS = frozenset({"/", "/health", "/docs", "/redoc", "/openapi.json"})


class LoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, time it and log the outcome."""

    def __init__(self, app, log_requests: bool = True, log_responses: bool = True):
        super().__init__(app)
        self.log_requests = log_requests
        self.log_responses = log_responses

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid4().hex
        token = request_id_var.set(request_id)
        started = time.perf_counter()
        quiet = request.url.path in QUIET_PATHS
        try:
            if self.log_requests and not quiet:
                logger.info(
                    f"{request.method} {request.url.path}",
                    extra={"client_ip": request.client.host if request.client else None},
                )
            response = await call_next(request)
            elapsed = time.perf_counter() - started
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{elapsed:.4f}"
            if self.log_responses and not quiet:
                level = logging.INFO
                if response.status_code >= 500:
                    level = logging.ERROR
                elif response.status_code >= 400:
                    level = logging.WARNING
                logger.log(
                    level,
                    f"{request.method} {request.url.path} -> {response.status_code} ({elapsed * 1000:.1f} ms)",
                    extra={"status_code": response.status_code},
                )
            return response
        finally:
            request_id_var.reset(token)
