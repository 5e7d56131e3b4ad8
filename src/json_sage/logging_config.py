"""Structured logging for the json-sage CLI.

Events are rendered through stdlib logging onto stderr, so stdout carries
only generated JSON: key/value console lines in development, one JSON
object per line in production.
"""

import logging
import sys
from typing import Optional, TextIO

import structlog
from structlog.types import EventDict, WrappedLogger

QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def add_app_context(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    event_dict["app"] = "json-sage"
    return event_dict


def configure_logging(
    log_level: str = "WARNING",
    environment: str = "development",
    stream: Optional[TextIO] = None,
) -> None:
    """Route structlog and stdlib records to ``stream`` (stderr by default).

    Unknown level names fall back to WARNING. Calling this again replaces
    the previous handler.
    """
    stream = stream or sys.stderr
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        level = logging.WARNING

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_app_context,
    ]

    if environment.lower() == "production":
        pre_chain += [structlog.processors.TimeStamper(fmt="iso"), structlog.processors.format_exc_info]
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        pre_chain.append(structlog.processors.TimeStamper(fmt="%H:%M:%S"))
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=pre_chain)
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
