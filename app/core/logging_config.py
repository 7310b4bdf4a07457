import logging

import structlog

from app.core.config import settings

# Request lines are already logged by the request middleware
QUIET_LOGGERS = ("uvicorn.access",)


def _add_service_context(logger, method_name, event_dict):
    event_dict.setdefault("service", settings.PROJECT_NAME)
    event_dict.setdefault("environment", settings.ENVIRONMENT)
    return event_dict


def configure_logging():
    """Configure structlog for the marketplace API.

    Events are rendered as JSON lines, or with the console renderer when
    ``DEBUG`` is on. Values bound with ``structlog.contextvars`` (the request
    correlation id) are merged into every event.
    """
    level_name = "DEBUG" if settings.DEBUG else settings.LOG_LEVEL.upper()
    level = getattr(logging, level_name, logging.INFO)

    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.DEBUG
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            _add_service_context,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", level=level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
