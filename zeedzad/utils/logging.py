"""Logging setup for the service and the uvicorn server it runs under."""

import logging
import sys
from typing import Any, Literal

from zeedzad.config import Settings, get_settings

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are too chatty below WARNING
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine", "aiosqlite")


def _default_level(settings: Settings | None) -> LogLevel:
    if settings is None:
        try:
            settings = get_settings()
        except ValueError:
            # Invalid settings are reported by the caller
            return "INFO"
    return "INFO" if settings.is_production else "DEBUG"


def setup_logging(level: LogLevel | None = None, settings: Settings | None = None) -> None:
    """Configure the root logger once.

    Args:
        level: Override log level (default: INFO in production, DEBUG otherwise)
        settings: Settings to derive the level from (default: the cached settings)
    """
    level = level or _default_level(settings)

    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_uvicorn_log_config(level: LogLevel = "INFO") -> dict[str, Any]:
    """uvicorn ``log_config`` writing server logs in the application format."""
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT, "datefmt": LOG_DATE_FORMAT},
            "access": {
                "()": "uvicorn.logging.AccessFormatter",
                "fmt": '%(asctime)s - %(name)s - %(client_addr)s - "%(request_line)s" %(status_code)s',
                "datefmt": LOG_DATE_FORMAT,
                "use_colors": False,
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "uvicorn.error": {"handlers": ["default"], "level": level, "propagate": False},
            "uvicorn.access": {"handlers": ["access"], "level": "WARNING", "propagate": False},
        },
    }


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """Logger wrapper that prefixes every message with ``[key=value]`` pairs.

    Usage:
        log = LogContext(logger, channel="UC...")
        log.info("Sync finished")  # "[channel=UC...] Sync finished"
    """

    def __init__(self, logger: logging.Logger, **context: str) -> None:
        self.logger = logger
        self.context = context
        self.prefix = " ".join(f"[{k}={v}]" for k, v in context.items())

    def _log(self, level: int, msg: str, *args, **kwargs) -> None:
        self.logger.log(level, f"{self.prefix} {msg}", *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        self._log(logging.ERROR, msg, *args, **kwargs)
