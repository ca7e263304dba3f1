"""
OpenTelemetry instrumentation setup.

This module configures OpenTelemetry for distributed tracing and
starts the Prometheus metrics endpoint.
"""
import logging
import os
import socket

from django.conf import settings
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.django import DjangoInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Status, StatusCode  # noqa: F401  re-exported for views
from prometheus_client import start_http_server

logger = logging.getLogger(__name__)


def setup_opentelemetry():
    """
    Configure OpenTelemetry instrumentation.

    Sets up:
    - Distributed tracing (exported via OTLP)
    - Auto-instrumentation for Django
    - A standalone Prometheus metrics server
    """
    if not getattr(settings, "OTEL_ENABLED", False):
        logger.info("OpenTelemetry disabled, skipping instrumentation setup")
        return

    # Resource attributes
    service_name = os.environ.get("OTEL_SERVICE_NAME", "license-sync-service")
    service_version = os.environ.get("OTEL_SERVICE_VERSION", "1.0.0")
    environment = os.environ.get("ENVIRONMENT", "development")

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": service_version,
            "deployment.environment": environment,
        }
    )

    # Configure tracing
    trace_provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(trace_provider)

    otlp_endpoint = os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", "http://tempo:4317")
    otlp_exporter = OTLPSpanExporter(
        endpoint=otlp_endpoint,
        insecure=os.environ.get("OTEL_EXPORTER_OTLP_INSECURE", "true").lower() == "true",
    )
    trace_provider.add_span_processor(BatchSpanProcessor(otlp_exporter))

    # Auto-instrumentation
    DjangoInstrumentor().instrument()

    _start_metrics_server(int(os.environ.get("PROMETHEUS_PORT", "9090")))

    logger.info("OpenTelemetry instrumentation configured")


def _start_metrics_server(port: int) -> None:
    """Start the Prometheus exporter unless something already listens on ``port``."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        in_use = sock.connect_ex(("127.0.0.1", port)) == 0
    finally:
        sock.close()

    if in_use:
        logger.info("Prometheus metrics server already running on port %s", port)
        return
    try:
        start_http_server(port, addr="0.0.0.0")
        logger.info("Prometheus metrics server started on 0.0.0.0:%s", port)
    except OSError as e:
        logger.warning("Could not start Prometheus metrics server: %s", e)


def get_tracer(name: str) -> trace.Tracer:
    """
    Get a tracer instance for manual instrumentation.

    Without a configured provider this is OpenTelemetry's no-op tracer.

    Args:
        name: Tracer name (usually module name)

    Returns:
        Tracer instance
    """
    return trace.get_tracer(name)
