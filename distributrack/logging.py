"""Logging configuration for DistribuTrack."""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional


def setup_logging(level: str = "INFO") -> None:
    """Configure pipe-separated logging on stdout for the application."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )

    # Third-party loggers are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class ServiceLogger:
    """Logger for one service that renders keyword context as ``key=value`` pairs."""

    def __init__(self, service_name: str) -> None:
        self._logger = get_logger(f"distributrack.{service_name}")

    def info(self, message: str, **context: Any) -> None:
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(logging.WARNING, message, context)

    def error(self, message: str, **context: Any) -> None:
        self._log(logging.ERROR, message, context)

    def exception(self, message: str, exc: Optional[BaseException] = None, **context: Any) -> None:
        self._log(logging.ERROR, message, context, exc_info=exc or True)

    def debug(self, message: str, **context: Any) -> None:
        self._log(logging.DEBUG, message, context)

    def _log(self, level: int, message: str, context: dict[str, Any], exc_info: Any = False) -> None:
        if context:
            context_str = " | ".join(f"{k}={v}" for k, v in context.items())
            message = f"{message} | {context_str}"
        self._logger.log(level, message, exc_info=exc_info)
