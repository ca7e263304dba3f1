"""
Observability middleware.

Adds a correlation id to every request and logs one structured line when
the request starts and one when it ends, joined with the active
OpenTelemetry trace.

License operations answer HTTP 200 whatever their outcome, so the request
status is classified from the operation status the license views attach
to the request, falling back to the HTTP status code elsewhere.
"""
import logging
import time
import uuid
from typing import Callable, Dict, Optional

from django.http import HttpRequest, HttpResponse
from opentelemetry import trace
from opentelemetry.trace import format_span_id, format_trace_id

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "HTTP_X_CORRELATION_ID"

# Outcomes where the caller got what it asked for
_SUCCESS_OUTCOMES = frozenset({"OK", "NO_CHANGE", "UPDATE"})


def classify_request(status_code: int, operation_status: Optional[str]) -> str:
    """
    Classify a finished request for logs and the X-Request-Status header.

    Args:
        status_code: HTTP status code of the response
        operation_status: License operation status, if the view set one

    Returns:
        One of ``success``, ``refused``, ``client_error`` or ``server_error``
    """
    if status_code >= 500 or operation_status == "ERROR":
        return "server_error"
    if operation_status and operation_status not in _SUCCESS_OUTCOMES:
        return "refused"
    if status_code >= 400:
        return "client_error"
    return "success"


def _trace_context() -> Dict[str, str]:
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return {}
    return {
        "trace_id": format_trace_id(span_context.trace_id),
        "span_id": format_span_id(span_context.span_id),
    }


class ObservabilityMiddleware:
    """
    Middleware for request observability.

    This middleware:
    1. Generates correlation IDs for request tracing
    2. Logs request start and completion with the license outcome
    3. Adds correlation, status and trace headers to the response
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
        correlation_id = request.META.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.correlation_id = correlation_id  # type: ignore
        trace_context = _trace_context()

        logger.info(
            "Request started",
            extra={
                "correlation_id": correlation_id,
                "method": request.method,
                "path": request.path,
                "remote_addr": request.META.get("REMOTE_ADDR"),
                "user_agent": request.META.get("HTTP_USER_AGENT", ""),
                **trace_context,
            },
        )

        start_time = time.time()
        try:
            response = self.get_response(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    "correlation_id": correlation_id,
                    "request_status": "exception",
                    "method": request.method,
                    "path": request.path,
                    "error_type": type(e).__name__,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                },
                exc_info=True,
            )
            raise

        duration = time.time() - start_time
        # Set by the license views
        license_key = getattr(request, "license_key", None)
        operation_status = getattr(request, "operation_status", None)
        request_status = classify_request(response.status_code, operation_status)

        log_extra = {
            "correlation_id": correlation_id,
            "request_status": request_status,
            "method": request.method,
            "path": request.path,
            "status_code": response.status_code,
            "duration_ms": round(duration * 1000, 2),
            **trace_context,
        }
        if license_key:
            log_extra["license_key"] = license_key
        if operation_status:
            log_extra["operation_status"] = operation_status

        if request_status == "server_error":
            logger.error("Request completed with server error", extra=log_extra)
        elif request_status == "success":
            logger.info("Request completed successfully", extra=log_extra)
        else:
            logger.warning(f"Request completed: {request_status}", extra=log_extra)

        response["X-Correlation-ID"] = correlation_id
        response["X-Request-Status"] = request_status
        response["X-Request-Duration"] = f"{duration:.3f}"
        if operation_status:
            response["X-License-Status"] = operation_status
        if "trace_id" in trace_context:
            response["X-Trace-ID"] = trace_context["trace_id"]
        return response
