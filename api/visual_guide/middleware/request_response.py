"""Request/Response middleware: request ids, timing and access logging."""

from __future__ import annotations

import time
from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..core.structured_logging import LoggerFactory, request_id_var

logger = LoggerFactory.get_logger(__name__)


class RequestResponseMiddleware(BaseHTTPMiddleware):
    """Tag every request with an id and log its outcome."""

    def __init__(self, app: ASGIApp, log_requests: bool = True):
        super().__init__(app)
        self.log_requests = log_requests

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        start_time = time.time()

        try:
            if self.log_requests:
                logger.info(
                    f"API Request: {request.method} {request.url.path}",
                    http_method=request.method,
                    http_path=request.url.path,
                    event_type="api_request",
                )

            response = await call_next(request)

            duration_ms = round((time.time() - start_time) * 1000, 2)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Processing-Time-Ms"] = str(duration_ms)

            if self.log_requests:
                logger.info(
                    f"API Response: {response.status_code}",
                    http_status=response.status_code,
                    response_time_ms=duration_ms,
                    event_type="api_response",
                )
            return response
        finally:
            request_id_var.reset(token)
