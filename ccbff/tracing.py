import json
import logging

from fastapi import FastAPI

from .config import Settings
from .upstream import UpstreamClient


logger = logging.getLogger("ccbff.tracing")


def init_tracing(app: FastAPI, cfg: Settings, upstream: UpstreamClient) -> bool:
    """Export spans over OTLP/HTTP and instrument the app plus the shared upstream client.

    Instrumented httpx calls carry the W3C `traceparent` of the active span.
    Returns False when tracing is disabled or could not be set up.
    """
    if not cfg.OTEL_ENABLED or getattr(app.state, "otel_initialized", False):
        return False
    # Lazy import to avoid test overhead when unused
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
    from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor

    try:
        resource = Resource.create({
            "service.name": cfg.OTEL_SERVICE_NAME,
            "deployment.environment": cfg.ENV,
        })
        provider = TracerProvider(resource=resource)
        exporter = OTLPSpanExporter(endpoint=f"{cfg.OTEL_EXPORTER_OTLP_ENDPOINT.rstrip('/')}/v1/traces")
        provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)
        FastAPIInstrumentor.instrument_app(app, tracer_provider=provider)
        HTTPXClientInstrumentor.instrument_client(upstream.client, tracer_provider=provider)
    except Exception as e:
        # tracing is optional; the app keeps serving without it
        logger.warning(json.dumps({"event": "otel_init_failed", "error": repr(e)}))
        return False
    app.state.otel_initialized = True
    return True
