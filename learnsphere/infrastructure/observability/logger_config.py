import logging

import structlog
from structlog.contextvars import merge_contextvars

from learnsphere.core.settings import settings
from learnsphere.infrastructure.observability.context_vars import get_run_id, get_session_id
from learnsphere.infrastructure.observability.correlation import (
    CorrelationLogFilter,
    get_correlation_id,
)


def add_context_vars(_, __, event_dict):
    """
    Injects the correlation id and the session/run trace into each event.
    """
    cid = get_correlation_id()
    if cid:
        event_dict["correlation_id"] = cid

    trace = {
        "session_id": get_session_id(),
        "run_id": get_run_id(),
    }
    existing_trace = event_dict.get("trace", {})
    if isinstance(existing_trace, dict):
        trace.update(existing_trace)

    event_dict["trace"] = {k: v for k, v in trace.items() if v is not None}
    return event_dict


def configure_structlog():
    """
    Configures structlog for JSON output routed through stdlib logging.
    """
    handler = logging.StreamHandler()
    handler.addFilter(CorrelationLogFilter())
    handler.setFormatter(
        logging.Formatter(
            " [%(asctime)s] [%(levelname)s] [trace_id=%(correlation_id)s] %(name)s: %(message)s"
        )
    )

    resolved_level = str(settings.LOG_LEVEL or "INFO").upper()
    log_level = getattr(logging, resolved_level, logging.INFO)

    logging.basicConfig(format="%(message)s", level=log_level, handlers=[handler], force=True)

    processors = [
        merge_contextvars,
        add_context_vars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
