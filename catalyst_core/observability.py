# catalyst_core/observability.py
from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider

from catalyst_core.config import get_settings


def setup_observability(app: FastAPI) -> bool:
    """
    Configures OpenTelemetry for the application.

    Sets the global tracer provider and auto-instruments the FastAPI app so
    every HTTP request gets a span (and log lines get trace ids). Returns
    False without touching anything when tracing is disabled.
    """
    settings = get_settings()
    if not settings.OTEL_ENABLED:
        return False

    resource = Resource.create(attributes={
        "service.name": settings.OTEL_SERVICE_NAME,
        "service.environment": settings.APP_ENV.value,
        "service.version": settings.APP_VERSION,
    })
    provider = TracerProvider(resource=resource)
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(app, tracer_provider=provider)
    return True


def get_tracer(name: str):
    """
    Utility to get a tracer for manual instrumentation in services.
    Usage:
        tracer = get_tracer(__name__)
        with tracer.start_as_current_span("facts.record"):
            ...
    """
    return trace.get_tracer(name)
