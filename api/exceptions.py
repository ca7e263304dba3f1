"""
API exception handlers.

Every error leaves the API as ``{"error": {"code": ..., "message": ...}}``.
Storage failures are reported as a bare ``ERROR`` so no database detail
reaches the caller.
"""
import logging
from typing import Any, Dict, Optional

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    AdminAuthorizationError,
    DomainException,
    LicenseNotFoundError,
    LicenseStorageError,
)

logger = logging.getLogger(__name__)

# Checked in order; the first matching class wins
_DOMAIN_STATUS_CODES = (
    (LicenseStorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (LicenseNotFoundError, status.HTTP_404_NOT_FOUND),
    (AdminAuthorizationError, status.HTTP_403_FORBIDDEN),
    (DomainException, status.HTTP_400_BAD_REQUEST),
)


def _error_body(code: str, message: Any) -> Dict[str, Any]:
    return {"error": {"code": code, "message": message}}


def _with_trace(response: Response, trace_id: Optional[str]) -> Response:
    if trace_id:
        response["X-Trace-ID"] = trace_id
    return response


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    trace_id = _get_trace_id(context)

    if isinstance(exc, DomainException):
        return _with_trace(_handle_domain_exception(exc, trace_id), trace_id)

    if isinstance(exc, APIException):
        response = exception_handler(exc, context)
        if response is not None:
            code = getattr(exc, "default_code", "api_error").upper().replace("-", "_")
            detail = response.data
            if isinstance(detail, dict) and "detail" in detail:
                detail = detail["detail"]
            response.data = _error_body(code, detail)
            return _with_trace(response, trace_id)

    if isinstance(exc, Http404):
        return _with_trace(
            Response(_error_body("NOT_FOUND", "Resource not found"), status=status.HTTP_404_NOT_FOUND),
            trace_id,
        )

    logger.error("Unexpected error: %s", exc, extra={"trace_id": trace_id}, exc_info=True)
    return _with_trace(
        Response(
            _error_body("INTERNAL_ERROR", "An internal error occurred"),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        ),
        trace_id,
    )


def _get_trace_id(context: Dict[str, Any]) -> Optional[str]:
    """Extract trace ID from request context."""
    request = context.get("request")
    if not request:
        return None
    return getattr(request, "trace_id", getattr(request, "correlation_id", None))


def _handle_domain_exception(exc: DomainException, trace_id: Optional[str]) -> Response:
    """Map a domain exception to its HTTP status."""
    status_code = next(code for cls, code in _DOMAIN_STATUS_CODES if isinstance(exc, cls))

    if isinstance(exc, LicenseStorageError):
        logger.error("Storage exception: %s - %s", exc.code, exc.message, extra={"trace_id": trace_id})
        return Response(_error_body("ERROR", "License storage unavailable"), status=status_code)

    logger.warning("Domain exception: %s - %s", exc.code, exc.message, extra={"trace_id": trace_id})
    return Response(_error_body(exc.code, exc.message), status=status_code)
