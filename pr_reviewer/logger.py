from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from loguru import logger as _logger

_LEVEL_ALIASES = {
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
}

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)


def normalize_level(level: str | None) -> str:
    """Map a configured level name (debug|info|warn|error) to a Loguru level."""

    if not level:
        return "INFO"
    return _LEVEL_ALIASES.get(level.strip().lower(), "INFO")


def configure_logger(*, level: str | None = None, log_dir: str | Path | None = None) -> None:
    """Replace Loguru's default sink with the review bot's sinks.

    Called once by the command line entry point. Library code never configures
    logging on import.
    """

    _logger.remove()
    _logger.add(
        sys.stderr,
        level=normalize_level(level),
        format=LOG_FORMAT,
        colorize=sys.stderr.isatty(),
    )
    if log_dir is not None:
        target_dir = Path(log_dir).expanduser().resolve()
        target_dir.mkdir(parents=True, exist_ok=True)
        _logger.add(
            target_dir / "{time:YYYY-MM-DD}.log",
            rotation="50 MB",
            retention="10 days",
            level="DEBUG",
            format=LOG_FORMAT,
            backtrace=True,
            diagnose=False,
        )


def get_logger():
    """Return the shared Loguru logger."""

    return _logger


def log_with_context(logger_instance, **context: str | int | None) -> Any:
    """Bind non-empty context fields to a logger.

    Usage:
        logger = log_with_context(get_logger(), repository="owner/repo", pull_number=7)
        logger.info("Fetching files")
    """
    return logger_instance.bind(**{k: v for k, v in context.items() if v is not None})


def log_timing(logger_instance, operation: str, **context: str | int | None):
    """Context manager that logs how long an operation took.

    Usage:
        with log_timing(logger, "fetch_diffs", repository="owner/repo"):
            ...
    """
    @contextmanager
    def _timing():
        start_time = time.perf_counter()
        ctx_logger = log_with_context(logger_instance, **context)
        ctx_logger.debug(f"Starting {operation}")
        try:
            yield ctx_logger
            duration = time.perf_counter() - start_time
            ctx_logger.debug(f"Completed {operation} in {duration:.3f}s")
        except Exception as exc:
            duration = time.perf_counter() - start_time
            ctx_logger.error(f"Failed {operation} after {duration:.3f}s: {exc}")
            raise
    return _timing()


def log_success(logger_instance, message: str, **context: str | int | None) -> None:
    log_with_context(logger_instance, **context).info(f"=== SUCCESS: {message} ===")


def log_failure(logger_instance, message: str, error: Exception | None = None, **context: str | int | None) -> None:
    ctx_logger = log_with_context(logger_instance, **context)
    if error:
        ctx_logger.error(f"=== FAILURE: {message} | Error: {error} ===")
    else:
        ctx_logger.error(f"=== FAILURE: {message} ===")
