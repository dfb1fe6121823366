"""Process-wide logging through loguru.

``setup_logging`` installs one loguru sink (coloured text, or JSON lines for
log shippers) and reroutes every stdlib logger into it: uvicorn, SQLAlchemy,
httpx and Alembic included.  Records are bound with ``service`` so JSON
output can be filtered per service.
"""

from __future__ import annotations

import logging
import sys

from loguru import logger

SERVICE_NAME = "task-management-api"

TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Loggers that install their own handlers; emptied so records reach the root handler.
_OWN_HANDLER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")

# Per-request and per-statement chatter, kept at WARNING.
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx", "httpcore")


class _StdlibToLoguru(logging.Handler):
    """Forward a stdlib ``LogRecord`` to loguru at its original call-site."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.bind(stdlib_logger=record.name).opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def setup_logging(level: str = "INFO", *, json_logs: bool = False) -> None:
    """Make loguru the only sink.  Safe to call more than once."""
    level = level.upper()

    logger.remove()
    logger.configure(extra={"service": SERVICE_NAME})
    if json_logs:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=TEXT_FORMAT)

    logging.basicConfig(handlers=[_StdlibToLoguru()], level=0, force=True)
    for name in _OWN_HANDLER_LOGGERS:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers.clear()
        stdlib_logger.propagate = True
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging initialised (level={}, json={})", level, json_logs)
