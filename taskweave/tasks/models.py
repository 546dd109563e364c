"""Pydantic models for normalized tasks.

Every raw task description (name, function or mapping) normalizes into
exactly one of six shapes, told apart by the ``kind`` discriminator.
"""

from collections.abc import Callable
from typing import Annotated, Any, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from taskweave.execution.actions import ANONYMOUS, CONVENTION_ATTR, Convention
from taskweave.files.records import FileRecord

# =============================================================================
# CONVENTION DECORATORS
# =============================================================================


def uses_done(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Declare that ``fn`` takes a ``done(error=None)`` completion callback.

    Example:
        >>> @uses_done
        ... def build(done):
        ...     threading.Timer(0.1, done).start()
    """
    setattr(fn, CONVENTION_ATTR, Convention.CALLBACK.value)
    return fn


def in_thread(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Declare that ``fn`` blocks and should run in a worker thread."""
    setattr(fn, CONVENTION_ATTR, Convention.THREAD.value)
    return fn


# =============================================================================
# TASK SHAPES
# =============================================================================


class TaskBase(BaseModel):
    """Fields shared by every task shape."""

    model_config = ConfigDict(frozen=False, arbitrary_types_allowed=True)

    uid: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Stable identity used for memoization and de-duplication",
    )
    name: str | None = Field(
        default=None,
        description="Task name; None for anonymous nested tasks",
    )
    watch: list[str] | None = Field(
        default=None,
        description="Paths or patterns whose changes re-run this task",
    )

    @property
    def display_name(self) -> str:
        return self.name or ANONYMOUS

    def children(self) -> list["Task"]:
        """Directly nested tasks."""
        return []


class AliasTask(TaskBase):
    """Refers to another task by name."""

    kind: Literal["alias"] = "alias"
    target: str = Field(..., min_length=1, description="Name of the aliased task")


class CallbackTask(TaskBase):
    """Wraps a plain unit of work."""

    kind: Literal["callback"] = "callback"
    fn: Callable[..., Any]
    convention: Convention = Field(default=Convention.SYNC)


class PipelineTask(TaskBase):
    """Reads files, transforms them, optionally renames and writes them."""

    kind: Literal["pipeline"] = "pipeline"
    src: str | list[str] | FileRecord
    transforms: list[Callable[..., Any]] = Field(default_factory=list)
    rename: str | dict[str, Any] | Callable[..., Any] | None = None
    dest: str | None = None
    base: str | None = None


class WrappedTask(TaskBase):
    """Wraps exactly one nested task."""

    kind: Literal["wrapped"] = "wrapped"
    inner: "Task"

    def children(self) -> list["Task"]:
        return [self.inner]


class SeriesTask(TaskBase):
    """Runs nested tasks one after another."""

    kind: Literal["series"] = "series"
    steps: list["Task"] = Field(default_factory=list)

    def children(self) -> list["Task"]:
        return list(self.steps)


class ParallelTask(TaskBase):
    """Runs nested tasks concurrently."""

    kind: Literal["parallel"] = "parallel"
    steps: list["Task"] = Field(default_factory=list)

    def children(self) -> list["Task"]:
        return list(self.steps)


Task = Annotated[
    Union[AliasTask, CallbackTask, PipelineTask, WrappedTask, SeriesTask, ParallelTask],
    Field(discriminator="kind"),
]

TaskTable = dict[str, Task]

WrappedTask.model_rebuild()
SeriesTask.model_rebuild()
ParallelTask.model_rebuild()
