"""Task model compiler - validation, normalization, composition and registration."""

from taskweave.tasks.compiler import TaskCompiler, compile_tasks
from taskweave.tasks.composer import Composer
from taskweave.tasks.models import (
    AliasTask,
    CallbackTask,
    ParallelTask,
    PipelineTask,
    SeriesTask,
    Task,
    TaskTable,
    WrappedTask,
    in_thread,
    uses_done,
)
from taskweave.tasks.normalizer import Normalizer, normalize_table
from taskweave.tasks.registry import TaskRegistry
from taskweave.tasks.validator import validate_description

__all__ = [
    # Models
    "AliasTask",
    "CallbackTask",
    "ParallelTask",
    "PipelineTask",
    "SeriesTask",
    "Task",
    "TaskTable",
    "WrappedTask",
    "in_thread",
    "uses_done",
    # Compilation
    "Composer",
    "Normalizer",
    "TaskCompiler",
    "TaskRegistry",
    "compile_tasks",
    "normalize_table",
    "validate_description",
]
