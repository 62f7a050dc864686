from __future__ import annotations

from typing import Optional

from fastapi import FastAPI
from sqlalchemy.engine import Engine

from .logging import ServiceLogger
from .settings import Settings

_log = ServiceLogger("observability")


def configure_observability(app: FastAPI, settings: Settings, engine: Optional[Engine] = None) -> None:
    """Export request and database spans when tracing is switched on."""
    if not settings.otel_enabled:
        return

    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
    from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

    provider = TracerProvider(
        resource=Resource.create({SERVICE_NAME: settings.otel_service_name, SERVICE_VERSION: app.version})
    )
    endpoint = settings.otel_exporter_otlp_endpoint
    exporter = OTLPSpanExporter(endpoint=endpoint) if endpoint else ConsoleSpanExporter()
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    # health checks would drown out order traffic
    FastAPIInstrumentor.instrument_app(app, excluded_urls="health")
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine)

    _log.info("Tracing enabled", service=settings.otel_service_name, exporter="otlp" if endpoint else "console")
