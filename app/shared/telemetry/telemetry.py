"""OpenTelemetry tracer provider for the API process and the scheduler script.

Exporters: console (local), otlp (gRPC collector) or none. Instrumentation
failures are logged and never stop the process.
"""

import logging
import threading

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

from app.core.config import Settings

logger = logging.getLogger(__name__)


def _build_exporter(kind: str, otlp_endpoint: str | None) -> SpanExporter | None:
    if kind == "none":
        return None
    if kind == "otlp":
        if otlp_endpoint:
            return OTLPSpanExporter(
                endpoint=otlp_endpoint, insecure=otlp_endpoint.startswith("http://")
            )
        logger.warning("telemetry_exporter=otlp without telemetry_otlp_endpoint; using console")
    elif kind != "console":
        logger.warning("Unknown telemetry exporter %r; using console", kind)
    return ConsoleSpanExporter()


class Telemetry:
    """Global tracer provider plus FastAPI, SQLAlchemy and logging instrumentation."""

    def __init__(self, provider: TracerProvider, exporter: str) -> None:
        self.provider = provider
        self.exporter = exporter

    @classmethod
    def from_settings(cls, settings: Settings) -> "Telemetry":
        """Create the provider, attach the exporter and install it globally."""
        resource = Resource(
            attributes={
                SERVICE_NAME: settings.app_name,
                SERVICE_VERSION: settings.app_version,
                "deployment.environment": settings.environment,
            }
        )
        provider = TracerProvider(
            resource=resource, sampler=TraceIdRatioBased(settings.telemetry_sample_rate)
        )
        exporter = _build_exporter(settings.telemetry_exporter, settings.telemetry_otlp_endpoint)
        if exporter is not None:
            provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)
        logger.info(
            "OpenTelemetry initialized: service=%s exporter=%s sample_rate=%s",
            settings.app_name,
            settings.telemetry_exporter,
            settings.telemetry_sample_rate,
        )
        return cls(provider, settings.telemetry_exporter)

    def instrument(self, app: FastAPI | None = None, engine: AsyncEngine | None = None) -> None:
        """Instrument whatever this process has: the API app, the SQL engine, logging."""
        if app is not None:
            self._try(
                "FastAPI",
                lambda: FastAPIInstrumentor.instrument_app(
                    app, tracer_provider=self.provider, excluded_urls="/api/v1/health"
                ),
            )
        if engine is not None:
            self._try(
                "SQLAlchemy",
                lambda: SQLAlchemyInstrumentor().instrument(
                    engine=engine.sync_engine,
                    tracer_provider=self.provider,
                    enable_commenter=True,
                ),
            )
        # Adds otelTraceID / otelSpanID to records; the log format stays ours.
        self._try(
            "logging",
            lambda: LoggingInstrumentor().instrument(
                tracer_provider=self.provider, set_logging_format=False
            ),
        )

    @staticmethod
    def _try(target: str, instrument) -> None:
        try:
            instrument()
        except Exception:
            logger.exception("Failed to instrument %s", target)
        else:
            logger.debug("%s instrumentation enabled", target)

    def shutdown(self) -> None:
        """Flush pending spans and stop the provider."""
        try:
            self.provider.shutdown()
        except Exception:
            logger.exception("Error during telemetry shutdown")


_telemetry: Telemetry | None = None
_telemetry_lock = threading.RLock()


def get_telemetry() -> Telemetry | None:
    with _telemetry_lock:
        return _telemetry


def set_telemetry(telemetry: Telemetry | None) -> None:
    global _telemetry
    with _telemetry_lock:
        _telemetry = telemetry
