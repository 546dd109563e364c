"""Logging setup and the logger protocol used by compiled tasks."""

import sys
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from taskweave.core.config import Settings, get_settings

LOG_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<level>{message}</level>"
)

DEBUG_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


class TaskLogger(Protocol):
    """Anything compiled tasks can log through (loguru, stdlib logging, ...)."""

    def info(self, message: str, *args: Any, **kwargs: Any) -> Any: ...

    def warning(self, message: str, *args: Any, **kwargs: Any) -> Any: ...

    def error(self, message: str, *args: Any, **kwargs: Any) -> Any: ...


class NullLogger:
    """Logger that drops everything."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass


def resolve_logger(candidate: TaskLogger | None) -> TaskLogger:
    """Map ``None`` to a silent logger."""
    if candidate is None:
        return NullLogger()
    return candidate


def configure_logging(settings: Settings | None = None) -> None:
    """Configure loguru sinks based on settings."""
    settings = settings or get_settings()
    logger.remove()  # Remove default handler

    level = "DEBUG" if settings.taskweave_debug else settings.taskweave_log_level
    log_format = DEBUG_LOG_FORMAT if settings.taskweave_debug else LOG_FORMAT

    logger.add(sys.stderr, level=level, format=log_format, colorize=True)

    if settings.taskweave_log_dir:
        logs_dir = Path(settings.taskweave_log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(logs_dir / "taskweave_{time:YYYY-MM-DD}.log"),
            rotation="1 day",
            retention="7 days",
            level=settings.taskweave_log_level,
            format=DEBUG_LOG_FORMAT,
        )
