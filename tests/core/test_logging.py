# tests/core/test_logging.py

from opentelemetry.sdk.trace import TracerProvider

from catalyst_core.config import Settings
from catalyst_core.logging_config import _trace_context, build_processors


def test_trace_ids_only_when_tracing_is_enabled():
    assert _trace_context not in build_processors(Settings(OTEL_ENABLED=False))
    assert _trace_context in build_processors(Settings(OTEL_ENABLED=True))


def test_renderer_follows_log_format():
    console = build_processors(Settings(LOG_FORMAT="console"))[-1]
    json_renderer = build_processors(Settings(LOG_FORMAT="json"))[-1]
    assert type(console).__name__ == "ConsoleRenderer"
    assert type(json_renderer).__name__ == "JSONRenderer"


def test_trace_context_reads_the_active_span():
    tracer = TracerProvider().get_tracer(__name__)
    with tracer.start_as_current_span("record"):
        event = _trace_context(None, "info", {"event": "measurement_recorded"})

    assert len(event["trace_id"]) == 32
    assert len(event["span_id"]) == 16
    assert _trace_context(None, "info", {"event": "idle"}) == {"event": "idle"}
