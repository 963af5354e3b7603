"""Logging for the storefront.

Output goes through the standard library (stdout plus size-rotated
``<prefix>.log`` and ``<prefix>_error.log`` files). structlog formats every
record in front of it: JSON lines in production and staging, Rich console
output elsewhere. Request-scoped values (session, path) are bound with
``bind_request_context`` and merged into each event.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

LEVEL_BY_ENVIRONMENT = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}

QUIET_LOGGERS = ("protean", "sqlalchemy.engine", "asyncio", "httpx")

_ROTATE_BYTES = 10 * 1024 * 1024
_ROTATE_KEEP = 5


def current_environment() -> str:
    return (os.getenv("ENV") or os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """``LOG_LEVEL`` wins; otherwise the level follows the environment."""
    return os.getenv("LOG_LEVEL", LEVEL_BY_ENVIRONMENT.get(current_environment(), "INFO"))


def _rotating_file(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=_ROTATE_BYTES,
        backupCount=_ROTATE_KEEP,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(level: str | None = None, log_dir: str = "logs", log_file_prefix: str = "rungear") -> None:
    log_level = level or get_log_level()
    log_path = Path(log_dir)
    log_path.mkdir(exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(log_level)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers = [
        console,
        _rotating_file(log_path / f"{log_file_prefix}.log", log_level),
        _rotating_file(log_path / f"{log_file_prefix}_error.log", logging.ERROR),
    ]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _renderer(environment: str):
    if environment in ("production", "staging"):
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=2),
    )


def setup_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.FUNC_NAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            _renderer(current_environment()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(level: str | None = None, log_dir: str = "logs", log_file_prefix: str = "rungear") -> None:
    """Configure stdlib handlers and structlog in one go. Safe to call more than once."""
    setup_stdlib_logging(level=level, log_dir=log_dir, log_file_prefix=log_file_prefix)
    setup_structlog()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(**values: Any) -> None:
    """Attach values to every event logged while serving the current request."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
