"""OpenTelemetry tracing configuration for the application.

Supports two backends:
- local: Sends traces to a local OTLP collector (e.g. Aspire dashboard) via gRPC
- appinsights: Sends traces to Azure Application Insights

Exporters live in the optional ``tracing`` extra and are imported lazily.
"""

import logging
from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter

logger = logging.getLogger(__name__)

TRACING_BACKENDS = ("disabled", "local", "appinsights")


def configure_tracing(
    backend: str,
    appinsights_connection_string: Optional[str] = None,
    otlp_endpoint: str = "http://localhost:4317",
    service_name: str = "workflow-ai",
) -> Optional[TracerProvider]:
    """Configure OpenTelemetry tracing based on backend selection.

    Args:
        backend: Tracing backend - "disabled", "local", or "appinsights"
        appinsights_connection_string: Azure App Insights connection string
            (required for appinsights backend)
        otlp_endpoint: OTLP endpoint for local backend
        service_name: service.name resource attribute

    Returns:
        The installed TracerProvider, or None when tracing stays off
    """
    if backend == "disabled":
        logger.info("Tracing is disabled")
        return None

    if backend == "local":
        exporter = _local_exporter(otlp_endpoint)
    elif backend == "appinsights":
        exporter = _appinsights_exporter(appinsights_connection_string)
    else:
        logger.warning(f"Unknown tracing backend: {backend}, tracing disabled")
        return None

    if exporter is None:
        return None

    provider = TracerProvider(resource=Resource.create({SERVICE_NAME: service_name}))
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    logger.info(f"Tracing configured with backend: {backend}")
    return provider


def _local_exporter(otlp_endpoint: str) -> SpanExporter:
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

    logger.info(f"Exporting traces to OTLP endpoint {otlp_endpoint}")
    return OTLPSpanExporter(endpoint=otlp_endpoint)


def _appinsights_exporter(connection_string: Optional[str]) -> Optional[SpanExporter]:
    """Azure Monitor trace exporter, used directly instead of configure_azure_monitor()
    to avoid auto-instrumentation slowing startup."""
    if not connection_string:
        logger.warning("App Insights connection string not provided, tracing disabled")
        return None

    from azure.monitor.opentelemetry.exporter import AzureMonitorTraceExporter

    return AzureMonitorTraceExporter(connection_string=connection_string)
