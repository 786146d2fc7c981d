"""
API exception handlers.

This module renders every error of the REST API as
``{"error": {"code": ..., "message": ...}}``.
"""

import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    CapacityExceededError,
    DomainException,
    ImageHostingError,
    InfrastructureException,
    NotFoundError,
    RemoteStoreError,
)
from core.metrics import errors_total

logger = logging.getLogger(__name__)

# Most specific classes first
DOMAIN_STATUS_CODES = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (CapacityExceededError, status.HTTP_409_CONFLICT),
    (RemoteStoreError, status.HTTP_502_BAD_GATEWAY),
    (ImageHostingError, status.HTTP_502_BAD_GATEWAY),
    (InfrastructureException, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_code_for(exc: DomainException) -> int:
    """
    Map a domain exception to an HTTP status code.

    Args:
        exc: Domain exception

    Returns:
        HTTP status code (400 for anything not listed)
    """
    for exc_type, status_code in DOMAIN_STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return status.HTTP_400_BAD_REQUEST


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    trace_id = _get_trace_id(context)
    endpoint = _get_endpoint(context)

    if isinstance(exc, DomainException):
        errors_total.labels(error_type=exc.code, endpoint=endpoint).inc()
        response = _handle_domain_exception(exc, trace_id)
        if trace_id:
            response["X-Trace-ID"] = trace_id
        return response

    if isinstance(exc, APIException):
        response = exception_handler(exc, context)
        if response:
            code = (
                exc.default_code.upper().replace("-", "_")
                if hasattr(exc, "default_code")
                else "API_ERROR"
            )
            detail = response.data.get("detail", exc.default_detail) if isinstance(
                response.data, dict
            ) else exc.default_detail
            response.data = {"error": {"code": code, "message": detail}}
            errors_total.labels(error_type=code, endpoint=endpoint).inc()
            if trace_id:
                response["X-Trace-ID"] = trace_id
            return response

    if isinstance(exc, Http404):
        errors_total.labels(error_type="NOT_FOUND", endpoint=endpoint).inc()
        response = Response(
            {"error": {"code": "NOT_FOUND", "message": "Resource not found"}},
            status=status.HTTP_404_NOT_FOUND,
        )
        if trace_id:
            response["X-Trace-ID"] = trace_id
        return response

    errors_total.labels(error_type="INTERNAL_ERROR", endpoint=endpoint).inc()
    return _handle_unexpected_exception(exc, context, trace_id)


def _get_trace_id(context: Dict[str, Any]) -> Optional[str]:
    """Extract trace ID from request context."""
    request = context.get("request")
    if not request:
        return None
    return getattr(request, "trace_id", getattr(request, "correlation_id", None))


def _get_endpoint(context: Dict[str, Any]) -> str:
    view = context.get("view")
    return view.__class__.__name__ if view is not None else "unknown"


def _handle_domain_exception(exc: DomainException, trace_id: Optional[str]) -> Response:
    """Handle domain-specific exceptions."""
    status_code = status_code_for(exc)
    log = logger.error if status_code >= 500 else logger.warning
    log("Domain exception: %s - %s", exc.code, exc.message, extra={"trace_id": trace_id})
    return Response({"error": {"code": exc.code, "message": exc.message}}, status=status_code)


def _handle_unexpected_exception(
    exc: Exception, context: Dict[str, Any], trace_id: Optional[str]
) -> Response:
    """Handle unexpected or untracked exceptions."""
    logger.error("Unexpected error: %s", exc, extra={"trace_id": trace_id}, exc_info=True)
    response = exception_handler(exc, context)
    if not response:
        response = Response(
            {"error": {"code": "INTERNAL_ERROR", "message": "An internal error occurred"}},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    else:
        response.data = {
            "error": {"code": "INTERNAL_ERROR", "message": "An internal error occurred"}
        }
    if trace_id:
        response["X-Trace-ID"] = trace_id
    return response
