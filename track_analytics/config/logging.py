"""
Logging Configuration for Track Analytics

Structured logs go to stderr so query results on stdout stay pipeable.
SQL echo is routed through the same handler instead of SQLAlchemy's own
stdout handler.
"""

import logging
import sys
from typing import Any, List, Optional, TextIO

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter

from track_analytics.config.settings import get_settings


def _shared_processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_format: str, stream: TextIO):
    if log_format == "json":
        return JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(log_level: Optional[str] = None, stream: Optional[TextIO] = None) -> None:
    """
    Configure structured logging for the command line.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        stream: Where records are written; stderr by default
    """
    settings = get_settings()
    level = log_level or settings.monitoring.log_level
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    stream = stream or sys.stderr
    shared_processors = _shared_processors()

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setLevel(numeric_level)
    handler.setFormatter(ProcessorFormatter(
        processor=_renderer(settings.monitoring.log_format, stream),
        foreign_pre_chain=shared_processors,
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)

    # Statements are logged at INFO by the engine logger
    sql_logger = logging.getLogger("sqlalchemy.engine")
    if settings.database.echo:
        sql_logger.setLevel(logging.INFO)
        handler.setLevel(min(numeric_level, logging.INFO))
    else:
        sql_logger.setLevel(logging.WARNING)

    structlog.get_logger(__name__).debug(
        "Logging configured",
        level=level,
        format=settings.monitoring.log_format,
        app=settings.app_name,
        environment=settings.app_env,
        sql_echo=settings.database.echo,
    )


def bind_command(command: str, **values: Any) -> None:
    """Attach the running command (and e.g. its entry name) to every later record"""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(command=command, **values)
