"""structlog setup for the API process and for processes hosting client stores.

Records from structlog and from stdlib loggers (uvicorn, httpx, redis) go
through one processor chain and one stdout handler. Each record carries the
service name, and the request's correlation_id while one is in flight.
"""

import logging
import logging.config

import structlog
from asgi_correlation_id.context import correlation_id

SERVICE_NAME = "statesync-backend"

# Chatty at INFO; their own warnings still get through
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "redis")


def add_correlation_id(logger, method, event_dict):
    cid = correlation_id.get(None)
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def add_service_name(logger, method, event_dict):
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_structlog(debug: bool = False, log_level: str | None = None) -> None:
    """Install the processor chain and route stdlib logging through it.

    ``debug`` selects colored console output at DEBUG; otherwise JSON lines at
    INFO. ``log_level`` overrides the level either way. Call once, before any
    logger is first used: loggers are cached on first use.
    """
    level = log_level or ("DEBUG" if debug else "INFO")
    renderer = structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer()

    pre_chain = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_service_name,
        add_correlation_id,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "statesync": {
                "()": structlog.stdlib.ProcessorFormatter,
                "processors": [structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
                "foreign_pre_chain": pre_chain,
            },
        },
        "handlers": {
            "stdout": {
                "class": "logging.StreamHandler",
                "formatter": "statesync",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"handlers": ["stdout"], "level": level},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    })

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
