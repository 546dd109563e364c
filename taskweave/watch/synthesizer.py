"""
Watch synthesizer - builds the ``watch`` task.

Tasks declaring ``watch`` paths (at any nesting depth) get an observer each
time the watch task runs; a change re-runs the task that declared the path.
"""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine, Iterable, Mapping
from functools import partial
from typing import TYPE_CHECKING, Any

import anyio

from taskweave.core.logging import TaskLogger, resolve_logger
from taskweave.execution.actions import Action, Convention, settle
from taskweave.tasks.models import CallbackTask, Task
from taskweave.watch.beep import Beeper
from taskweave.watch.observer import ChangeCallback, FileObserver, observe

if TYPE_CHECKING:
    from taskweave.tasks.composer import Composer

WATCH_TASK_NAME = "watch"

ObserveFn = Callable[[Iterable[str], ChangeCallback, float], FileObserver]
Teardown = Callable[[], Awaitable[None]]


class _Watched:
    """Run bookkeeping for one watched task."""

    def __init__(self, task: Task, action: Action):
        self.task = task
        self.action = action
        self.pending = 0
        self.draining = False


class WatchSession:
    """
    Observers and in-flight runs of one invocation of the watch task.

    Runs of the same task never overlap: a change during a run queues one
    more run per change. When beeping, a tone sounds once no watched task
    is running any more.
    """

    def __init__(
        self,
        entries: list[tuple[Task, Action]],
        logger: TaskLogger,
        observe_fn: ObserveFn,
        beeper: Beeper | None = None,
        delay: float = 0.0,
        grace: float = 0.01,
    ):
        self.watched = [_Watched(task, action) for task, action in entries]
        self.logger = logger
        self.observe_fn = observe_fn
        self.beeper = beeper
        self.delay = delay
        self.grace = grace
        self.running = 0
        self.observers: list[FileObserver] = []
        self._runs: set[asyncio.Task[None]] = set()

    async def start(self) -> Teardown:
        """Attach an observer per watched task and return the teardown function."""
        for watched in self.watched:
            paths = list(watched.task.watch or [])
            on_change = partial(self._on_change, watched)
            self.observers.append(self.observe_fn(paths, on_change, self.delay))
            for path in paths:
                self.logger.info(f"Watching '{path}' for changes...")
        return self.close

    def _on_change(self, watched: _Watched, path: str) -> None:
        self.logger.info(
            f"'{path}' was changed, running '{watched.task.display_name}'..."
        )
        watched.pending += 1
        if not watched.draining:
            watched.draining = True
            self._spawn(self._drain(watched))

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        run = asyncio.get_running_loop().create_task(coro)
        self._runs.add(run)
        run.add_done_callback(self._runs.discard)

    async def _drain(self, watched: _Watched) -> None:
        try:
            while watched.pending:
                watched.pending -= 1
                await self._run(watched)
        finally:
            watched.draining = False

    async def _run(self, watched: _Watched) -> None:
        self.running += 1
        try:
            error = await settle(watched.action)
        finally:
            self.running -= 1

        if self.beeper is None:
            return
        await anyio.sleep(self.grace)
        if self.running:
            return
        if error is not None:
            self.beeper.failure()
        else:
            self.beeper.success()

    async def close(self) -> None:
        """Close every observer concurrently, then let in-flight runs finish.

        Queued runs that have not started are dropped. Safe to call repeatedly.
        """
        for watched in self.watched:
            watched.pending = 0

        async with anyio.create_task_group() as tg:
            for observer in self.observers:
                tg.start_soon(observer.close)

        if self._runs:
            await asyncio.gather(*self._runs, return_exceptions=True)


def _default_observe(paths: Iterable[str], on_change: ChangeCallback, delay: float) -> FileObserver:
    return observe(paths, on_change, delay=delay)


class WatchSynthesizer:
    """
    Build the ``watch`` task for a task table.

    Example:
        >>> synthesizer = WatchSynthesizer(logger=logger, beep=True)
        >>> watch_task = synthesizer.synthesize(table, composer)
        >>> unwatch = await composer.compose(watch_task)()
        >>> await unwatch()
    """

    def __init__(
        self,
        logger: TaskLogger | None = None,
        beep: bool = False,
        observe_fn: ObserveFn | None = None,
        beeper: Beeper | None = None,
        delay: float = 0.0,
        grace: float = 0.01,
    ):
        self.logger = resolve_logger(logger)
        self.beep = beep
        self.observe_fn = observe_fn or _default_observe
        self.beeper = beeper or Beeper()
        self.delay = delay
        self.grace = grace

    @staticmethod
    def collect(table: Mapping[str, Task]) -> list[Task]:
        """Distinct tasks with a watch declaration, nested ones included."""
        found: dict[str, Task] = {}
        visited: set[str] = set()

        def visit(task: Task) -> None:
            if task.uid in visited:
                return
            visited.add(task.uid)
            if task.watch:
                found[task.uid] = task
            for child in task.children():
                visit(child)

        for task in table.values():
            visit(task)
        return list(found.values())

    def synthesize(self, table: Mapping[str, Task], composer: "Composer") -> CallbackTask | None:
        """
        Create the watch task, or ``None`` when there is nothing to do.

        Args:
            table: Normalized task table.
            composer: Composer whose actions the watch task runs.

        Returns:
            A callback task named ``watch``; ``None`` if the table already
            defines ``watch`` or no task declares watch paths.
        """
        if WATCH_TASK_NAME in table:
            self.logger.warning(f"'{WATCH_TASK_NAME}' task redefined.")
            return None

        watched = self.collect(table)
        if not watched:
            return None

        async def watch() -> Teardown:
            session = WatchSession(
                [(task, composer.compose(task)) for task in watched],
                logger=self.logger,
                observe_fn=self.observe_fn,
                beeper=self.beeper if self.beep else None,
                delay=self.delay,
                grace=self.grace,
            )
            return await session.start()

        return CallbackTask(name=WATCH_TASK_NAME, fn=watch, convention=Convention.ASYNC)
