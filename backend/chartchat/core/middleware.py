"""
Custom middleware for request tracing and timing.
"""
import uuid
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from fastapi import status
from fastapi.responses import JSONResponse
from chartchat.core.errors import ErrorCodes, get_error_response
from chartchat.core.logging import correlation_id_var
from chartchat.core.performance import PerformanceMonitor

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """Attach a correlation ID to each request, its log records and its response."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id
        token = correlation_id_var.set(correlation_id)

        start_time = time.perf_counter()
        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={"method": request.method, "path": request.url.path}
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(
                f"Request failed: {request.method} {request.url.path} - {e} ({duration:.3f}s)",
                extra={"method": request.method, "path": request.url.path, "duration": duration},
                exc_info=True
            )
            error_info = get_error_response(ErrorCodes.UNKNOWN_ERROR)
            error_info["correlation_id"] = correlation_id
            response = JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=error_info
            )
            response.headers[CORRELATION_HEADER] = correlation_id
            return response
        else:
            duration = time.perf_counter() - start_time
            PerformanceMonitor.record_metric(
                "request_duration",
                duration,
                {"method": request.method, "path": request.url.path, "status_code": response.status_code}
            )
            response.headers[CORRELATION_HEADER] = correlation_id
            response.headers["X-Response-Time"] = f"{duration:.3f}"
            logger.info(
                f"Request completed: {request.method} {request.url.path} - {response.status_code} ({duration:.3f}s)",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration": duration
                }
            )
            return response
        finally:
            correlation_id_var.reset(token)
