"""
Taskweave - declarative task orchestration.

Compile a mapping of task names to functions, aliases, file pipelines,
series and parallel groups into runnable actions, with an optional
synthesized watch task.
"""

__version__ = "0.1.0"
__author__ = "Taskweave Team"

from taskweave.execution.actions import Action
from taskweave.files.records import FileRecord
from taskweave.tasks.compiler import TaskCompiler, compile_tasks
from taskweave.tasks.models import in_thread, uses_done
from taskweave.tasks.registry import TaskRegistry

__all__ = [
    "Action",
    "FileRecord",
    "TaskCompiler",
    "TaskRegistry",
    "__version__",
    "compile_tasks",
    "in_thread",
    "uses_done",
]
