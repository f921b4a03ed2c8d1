# marketplace/shared/logging_config.py
import logging
import sys

import structlog
from opentelemetry import trace

from marketplace.shared.config import settings


def add_open_telemetry_spans(_, __, event_dict):
    """
    Processor to inject the current TraceID and SpanID into the log entry,
    so checkout and store events can be matched to their request trace.
    """
    span = trace.get_current_span()
    if not span.is_recording():
        event_dict["trace_id"] = None
        event_dict["span_id"] = None
        return event_dict

    ctx = span.get_span_context()
    event_dict["trace_id"] = format(ctx.trace_id, "032x")
    event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def configure_logging(log_format: str = settings.LOG_FORMAT, level: str = settings.LOG_LEVEL) -> None:
    """
    Configures structlog and the standard logging library to emit
    structured JSON logs (Production) or colored text logs (Development).

    Format and level default to the settings; the app factory passes them
    explicitly so a test container can pick its own.
    """

    # 1. Processor chain shared by every event
    processors = [
        structlog.contextvars.merge_contextvars,      # request-scoped context
        add_open_telemetry_spans,                     # trace_id / span_id
        structlog.processors.add_log_level,           # "level": "info"
        structlog.processors.TimeStamper(fmt="iso"),  # "timestamp": "2024-..."
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    # 2. Output format
    if log_format == "json":
        # Production: one JSON object per line
        processors.append(structlog.processors.JSONRenderer())
    else:
        # Development: colored console output
        processors.append(structlog.dev.ConsoleRenderer())

    # 3. Configure structlog
    structlog.configure(
        processors=processors,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # 4. Uvicorn and SQLAlchemy still log through the standard library.
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level.upper(),
    )
