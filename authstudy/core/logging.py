"""Structured logging for the API and CLI.

``configure_logging`` is called once per process with the settings the app (or
CLI) was built with: from the lifespan for the server, from the ``authstudy``
group callback for the CLI. Modules only ask for a logger.
"""

import logging
import sys

import structlog

from authstudy.core.config import Settings


def _renderer(settings: Settings) -> structlog.types.Processor:
    if settings.app_debug:
        return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    return structlog.processors.JSONRenderer()


def configure_logging(settings: Settings) -> None:
    """Point structlog and stdlib logging at stdout using ``settings``.

    Debug mode renders coloured key/value lines; otherwise one JSON object per
    line with tracebacks serialised as dicts.
    """
    log_level: int = getattr(logging, settings.log_level)

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if not settings.app_debug:
        processors.append(structlog.processors.dict_tracebacks)
    processors.append(_renderer(settings))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Reconfiguring (tests, CLI after app import) must reach existing loggers
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)
    logging.getLogger().setLevel(log_level)
    # SQL statements only when DB_ECHO asks for them
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.db_echo else logging.WARNING
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
