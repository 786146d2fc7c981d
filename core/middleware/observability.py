"""
Observability middleware.

This middleware adds logging, metrics, and request tracing.
Request logs are structured for JSON log aggregation and carry the
OpenTelemetry trace context when a span is active.
"""

import logging
import re
import time
import uuid
from typing import Callable, Optional, Tuple

from django.http import HttpRequest, HttpResponse
from opentelemetry import trace
from opentelemetry.trace import format_span_id, format_trace_id

from core.metrics import http_request_duration_seconds, http_requests_total

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Identifiers in paths are collapsed so metric labels stay bounded
_UUID_SEGMENT = re.compile(r"/[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}")
_HEX_SEGMENT = re.compile(r"/[0-9a-f]{32}(?=/|$)")
_NUMERIC_SEGMENT = re.compile(r"/\d+(?=/|$)")


def normalize_endpoint(path: str) -> str:
    """
    Replace identifiers in a request path with ``{id}``.

    Args:
        path: Request path

    Returns:
        Path suitable as a metric label
    """
    endpoint = _UUID_SEGMENT.sub("/{id}", path)
    endpoint = _HEX_SEGMENT.sub("/{id}", endpoint)
    return _NUMERIC_SEGMENT.sub("/{id}", endpoint)


class ObservabilityMiddleware:
    """
    Middleware for request observability.

    This middleware:
    1. Generates (or propagates) correlation IDs for request tracing
    2. Logs request/response information
    3. Records request count and duration metrics
    4. Adds correlation ID to response headers
    """

    def __init__(self, get_response: Callable):
        """Initialize middleware."""
        self.get_response = get_response

    def __call__(self, request: HttpRequest) -> HttpResponse:
        """
        Process request and add observability.

        Args:
            request: HTTP request

        Returns:
            HTTP response with observability headers
        """
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.correlation_id = correlation_id  # type: ignore

        trace_id, span_id = self._trace_context()
        endpoint = normalize_endpoint(request.path)

        start_time = time.time()
        log_extra = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.path,
            "remote_addr": request.META.get("REMOTE_ADDR"),
            "user_agent": request.META.get("HTTP_USER_AGENT", ""),
        }
        if trace_id:
            log_extra["trace_id"] = trace_id
            log_extra["span_id"] = span_id

        logger.info("Request started", extra=log_extra)

        try:
            response = self.get_response(request)
        except Exception as e:
            duration = time.time() - start_time
            self._record_metrics(request.method, endpoint, 500, duration)
            self._handle_exception(request, e, duration, correlation_id)
            raise

        duration = time.time() - start_time
        request_status = self._get_request_status(response)
        self._record_metrics(request.method, endpoint, response.status_code, duration)
        self._log_response(request, response, correlation_id, request_status, duration, trace_id, span_id)
        self._add_observability_headers(response, correlation_id, request_status, duration, trace_id)
        return response

    @staticmethod
    def _trace_context() -> Tuple[Optional[str], Optional[str]]:
        span = trace.get_current_span()
        context = span.get_span_context()
        if not context.is_valid:
            return None, None
        return format_trace_id(context.trace_id), format_span_id(context.span_id)

    @staticmethod
    def _record_metrics(method: str, endpoint: str, status_code: int, duration: float) -> None:
        http_requests_total.labels(method=method, endpoint=endpoint, status_code=status_code).inc()
        http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(duration)

    def _get_request_status(self, response: HttpResponse) -> str:
        """Determine request status based on status code."""
        if response.status_code >= 500:
            return "server_error"
        if response.status_code >= 400:
            return "client_error"
        return "success"

    def _log_response(self, request, response, correlation_id, status, duration, trace_id, span_id):
        """Log structured response information."""
        log_extra = {
            "correlation_id": correlation_id,
            "request_status": status,
            "method": request.method,
            "path": request.path,
            "status_code": response.status_code,
            "duration_ms": round(duration * 1000, 2),
            "response_size": len(response.content) if hasattr(response, "content") else 0,
        }
        if trace_id:
            log_extra["trace_id"] = trace_id
            log_extra["span_id"] = span_id

        identity = getattr(request, "identity_email", None)
        if identity:
            log_extra["user_email"] = identity

        if response.status_code >= 500:
            logger.error("Request completed with server error", extra=log_extra)
        elif response.status_code >= 400:
            logger.warning("Request completed with client error", extra=log_extra)
        else:
            logger.info("Request completed successfully", extra=log_extra)

    def _add_observability_headers(self, response, correlation_id, status, duration, trace_id):
        """Add observability headers to response."""
        response[CORRELATION_HEADER] = correlation_id
        response["X-Request-Status"] = status
        response["X-Request-Duration"] = f"{duration:.3f}"
        if trace_id:
            response["X-Trace-ID"] = trace_id

    def _handle_exception(self, request, e, duration, correlation_id):
        """Log a request that raised."""
        logger.error(
            "Request failed",
            extra={
                "correlation_id": correlation_id,
                "request_status": "exception",
                "method": request.method,
                "path": request.path,
                "error": str(e),
                "error_type": type(e).__name__,
                "duration_ms": round(duration * 1000, 2),
            },
            exc_info=True,
        )
