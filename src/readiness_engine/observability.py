"""structlog setup for the readiness engine.

Modules obtain a logger with ``get_logger(__name__)`` and log events with
keyword context. ``configure_logging`` is optional: without it structlog's
defaults print to stdout.
"""

import logging

import structlog

from readiness_engine.settings import Settings


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger bound to the given module name.

    Args:
        name: Logger name, normally the calling module's ``__name__``.

    Returns:
        A lazily configured structlog logger.
    """
    return structlog.get_logger(name)


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog processors and the minimum log level.

    Args:
        settings: Engine settings. Uses defaults when omitted.
    """
    settings = settings or Settings()
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer: structlog.typing.Processor
    if settings.log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=settings.service_name)
