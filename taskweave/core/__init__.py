"""Core module - configuration, logging, and exceptions."""

from taskweave.core.config import Settings, clear_settings_cache, get_settings
from taskweave.core.exceptions import (
    CircularAliasError,
    CompileError,
    InvalidTaskShapeError,
    ParallelRunError,
    RunError,
    StructureError,
    TaskweaveError,
    TransformContractError,
    UndefinedTaskError,
)
from taskweave.core.logging import NullLogger, TaskLogger, configure_logging, resolve_logger

__all__ = [
    "CircularAliasError",
    "CompileError",
    "InvalidTaskShapeError",
    "NullLogger",
    "ParallelRunError",
    "RunError",
    "Settings",
    "StructureError",
    "TaskLogger",
    "TaskweaveError",
    "TransformContractError",
    "UndefinedTaskError",
    "clear_settings_cache",
    "configure_logging",
    "get_settings",
    "resolve_logger",
]
