"""structlog logging for the client.

Client events are routed into the standard library ``bms_client`` logger, which
owns the handler and the level. Loggers of the host application are left alone.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog

LOGGER_NAME = "bms_client"

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


def new_logger(
    level: str = "INFO",
    format: str = "json",
    stream: TextIO | None = None,
) -> structlog.stdlib.BoundLogger:
    """Send client log events to ``stream`` and return the client logger.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: log level ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        format: output format ("json" or "text")
        stream: destination, defaults to stdout

    Returns:
        a structlog.stdlib.BoundLogger bound to the ``bms_client`` logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if format == "json" else structlog.dev.ConsoleRenderer(colors=False)
    )

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(LOGGER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    stdlib_logger = logging.getLogger(LOGGER_NAME)
    for old in [h for h in stdlib_logger.handlers if h.get_name() == LOGGER_NAME]:
        stdlib_logger.removeHandler(old)
    stdlib_logger.addHandler(handler)
    stdlib_logger.setLevel(log_level)
    stdlib_logger.propagate = False

    # rendering happens in the handler, so only the event dict is prepared here
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
    )

    return structlog.stdlib.get_logger(LOGGER_NAME)
