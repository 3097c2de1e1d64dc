# catalyst_core/logging_config.py
import logging
import sys
from typing import Optional

import structlog
from opentelemetry import trace

from catalyst_core.config import Settings, get_settings


def _trace_context(_, __, event_dict):
    """Tag the event with the ids of the active span, when there is one."""
    context = trace.get_current_span().get_span_context()
    if context.is_valid:
        event_dict.setdefault("trace_id", format(context.trace_id, "032x"))
        event_dict.setdefault("span_id", format(context.span_id, "016x"))
    return event_dict


def build_processors(settings: Settings) -> list:
    """
    The structlog processor chain for ``settings``.

    Trace ids are only added when OpenTelemetry is enabled; the renderer is
    JSON unless LOG_FORMAT asks for the console.
    """
    processors = [structlog.contextvars.merge_contextvars]
    if settings.OTEL_ENABLED:
        processors.append(_trace_context)
    processors += [
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.LOG_FORMAT == "console":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())
    return processors


def configure_logging(settings: Optional[Settings] = None):
    """
    Configures structlog and the standard logging library to emit
    structured JSON logs (production) or colored text logs (development).
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    structlog.configure(
        processors=build_processors(settings),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Uvicorn / SQLAlchemy still log through the standard library.
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )
