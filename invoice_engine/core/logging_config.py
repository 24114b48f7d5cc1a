# invoice_engine/core/logging_config.py

import logging
import sys

from loguru import logger

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[app]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
    "<level>{message}</level>"
)

# Environments that get one JSON object per line instead of colored text
_JSON_ENVIRONMENTS = {"prod", "production", "staging"}


class InterceptHandler(logging.Handler):
    """Send stdlib records (invoice_numbering, invoice_integrity, sqlalchemy, ...) to loguru."""

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str | None = None) -> None:
    """
    Configure loguru as the single log sink and route stdlib logging into it.

    ``level`` defaults to LOG_LEVEL. Records carry the APP_NAME as ``app``;
    production-like ENVIRONMENT values switch the sink to serialized JSON.
    """
    from invoice_engine.config.settings import settings

    level = (level or settings.LOG_LEVEL).upper()
    as_json = settings.ENVIRONMENT.strip().lower() in _JSON_ENVIRONMENTS

    logger.remove()
    logger.configure(extra={"app": settings.APP_NAME})
    if as_json:
        logger.add(sys.stdout, level=level, serialize=True, backtrace=False, diagnose=False)
    else:
        logger.add(
            sys.stdout,
            format=_CONSOLE_FORMAT,
            level=level,
            colorize=True,
            backtrace=False,
            diagnose=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=level, force=True)
    # SQL echo and driver chatter stay at WARNING regardless of LOG_LEVEL
    for name in ("sqlalchemy.engine", "aiosqlite", "asyncpg"):
        logging.getLogger(name).setLevel(logging.WARNING)
