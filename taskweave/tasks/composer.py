"""Composer - compiles normalized tasks into actions.

Aliases are resolved through the task table with cycle detection; every
task is composed at most once per pass (memoized by ``uid``).
"""

from collections.abc import Mapping

from taskweave.core.exceptions import (
    CircularAliasError,
    InvalidTaskShapeError,
    UndefinedTaskError,
)
from taskweave.core.logging import TaskLogger, resolve_logger
from taskweave.execution.actions import Action, invoke, parallel, series
from taskweave.files.pipeline import PipelineBuilder
from taskweave.tasks.models import (
    AliasTask,
    CallbackTask,
    ParallelTask,
    PipelineTask,
    SeriesTask,
    Task,
    WrappedTask,
)


class Composer:
    """
    Compose tasks from one task table into actions.

    Example:
        >>> composer = Composer(table)
        >>> action = composer.compose(table["build"])
        >>> await action()
    """

    def __init__(self, table: Mapping[str, Task], logger: TaskLogger | None = None):
        """
        Initialize the composer.

        Args:
            table: Task name -> task mapping aliases resolve against.
            logger: Logger handed to every produced action.
        """
        self.table = table
        self.logger = resolve_logger(logger)
        self._actions: dict[str, Action] = {}

    def action_for(self, task: Task) -> Action | None:
        """Return the already composed action of ``task``, if any."""
        return self._actions.get(task.uid)

    def compose(self, task: Task, aliases: list[str] | None = None) -> Action:
        """
        Compose a task (and everything it references) into an action.

        Args:
            task: Normalized task.
            aliases: Alias targets currently being resolved (cycle guard).

        Returns:
            The task's action; the same object on every call.

        Raises:
            UndefinedTaskError: If an alias target is not in the table.
            CircularAliasError: If an alias chain revisits a name.
            InvalidTaskShapeError: If the task has an unknown shape.
        """
        cached = self._actions.get(task.uid)
        if cached is not None:
            return cached

        aliases = aliases if aliases is not None else []

        if isinstance(task, AliasTask):
            action = self._compose_alias(task, aliases)
        elif isinstance(task, CallbackTask):
            action = self._compose_callback(task)
        elif isinstance(task, PipelineTask):
            action = self._compose_pipeline(task)
        elif isinstance(task, WrappedTask):
            inner = self.compose(task.inner, aliases)
            action = Action(inner, name=task.display_name, logger=self.logger, announce=False)
        elif isinstance(task, SeriesTask):
            steps = [self.compose(step, aliases) for step in task.steps]
            action = series(*steps, name=task.display_name, logger=self.logger)
        elif isinstance(task, ParallelTask):
            steps = [self.compose(step, aliases) for step in task.steps]
            action = parallel(*steps, name=task.display_name, logger=self.logger)
        else:
            raise InvalidTaskShapeError(f"Invalid task structure: {task!r}")  # Not expected.

        self._actions[task.uid] = action
        return action

    def compose_all(self) -> dict[str, Action]:
        """Compose every task in the table."""
        return {name: self.compose(task) for name, task in self.table.items()}

    # =========================================================================
    # SHAPES
    # =========================================================================

    def _compose_alias(self, task: AliasTask, aliases: list[str]) -> Action:
        target = self.table.get(task.target)
        if target is None:
            raise UndefinedTaskError(task.target)
        if task.target in aliases:
            start = aliases.index(task.target)
            raise CircularAliasError([*aliases[start:], task.target])

        aliases.append(task.target)
        try:
            resolved = self.compose(target, aliases)
        finally:
            aliases.pop()

        return Action(resolved, name=task.display_name, logger=self.logger, announce=False)

    def _compose_callback(self, task: CallbackTask) -> Action:
        fn = task.fn
        convention = task.convention

        async def run() -> object:
            return await invoke(fn, convention)

        return Action(run, name=task.display_name, logger=self.logger)

    def _compose_pipeline(self, task: PipelineTask) -> Action:
        async def run() -> object:
            return await PipelineBuilder(task).run()

        return Action(run, name=task.display_name, logger=self.logger)
