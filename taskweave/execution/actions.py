"""
Actions - the runnable form of compiled tasks.

An action is awaited to run its unit of work; success is a normal return,
failure is a raised exception. Series and parallel groups are actions too.
"""

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

import anyio

from taskweave.core.exceptions import ParallelRunError, RunError
from taskweave.core.logging import NullLogger, TaskLogger

ANONYMOUS = "<anonymous>"

CONVENTION_ATTR = "__taskweave_convention__"


# =============================================================================
# CALLING CONVENTIONS
# =============================================================================


class Convention(str, Enum):
    """How a unit of work signals completion."""

    SYNC = "sync"  # Returns (an awaitable return value is awaited)
    ASYNC = "async"  # Coroutine function
    CALLBACK = "callback"  # Receives done(error=None)
    THREAD = "thread"  # Blocking function run in a worker thread


def convention_of(fn: Callable[..., Any]) -> Convention:
    """Read a function's declared convention; ``async def`` declares ASYNC."""
    declared = getattr(fn, CONVENTION_ATTR, None)
    if declared is not None:
        return Convention(declared)
    if inspect.iscoroutinefunction(fn):
        return Convention.ASYNC
    return Convention.SYNC


async def _invoke_callback(fn: Callable[..., Any]) -> None:
    loop = asyncio.get_running_loop()
    future: asyncio.Future[None] = loop.create_future()

    def settle_future(error: object) -> None:
        if future.done():
            return
        if error is None or error is False:
            future.set_result(None)
        elif isinstance(error, BaseException):
            future.set_exception(error)
        else:
            future.set_exception(RunError(str(error)))

    def done(error: object = None) -> None:
        loop.call_soon_threadsafe(settle_future, error)

    fn(done)
    await future


async def invoke(fn: Callable[..., Any], convention: Convention | None = None) -> Any:
    """Run a unit of work to completion under its calling convention.

    Args:
        fn: The unit of work.
        convention: Overrides the function's declared convention.

    Returns:
        Whatever the unit of work produced (``None`` for callback style).

    Raises:
        Exception: Whatever the unit of work raised or passed to ``done``.
    """
    convention = convention or convention_of(fn)

    if convention == Convention.CALLBACK:
        return await _invoke_callback(fn)
    if convention == Convention.THREAD:
        return await anyio.to_thread.run_sync(fn)

    result = fn()
    if inspect.isawaitable(result):
        result = await result
    return result


# =============================================================================
# ACTION
# =============================================================================


class Action:
    """
    A named, awaitable unit of work.

    Announcing actions log when they start and finish; pass-through actions
    (aliases, wrappers) stay quiet so only the real work shows up.

    Example:
        >>> action = Action(lambda: invoke(build), name="build")
        >>> await action()
        >>> action.run_sync()
    """

    def __init__(
        self,
        run: Callable[[], Awaitable[Any]],
        name: str | None = None,
        logger: TaskLogger | None = None,
        announce: bool = True,
    ):
        self._run = run
        self.name = name
        self.logger = logger or NullLogger()
        self.announce = announce

    @property
    def display_name(self) -> str:
        return self.name or ANONYMOUS

    async def __call__(self) -> Any:
        if not self.announce:
            return await self._run()

        self.logger.info(f"Starting '{self.display_name}'...")
        started = time.perf_counter()
        try:
            result = await self._run()
        except Exception as e:
            self.logger.error(
                f"'{self.display_name}' errored after {_elapsed(started)}: {e}"
            )
            raise
        self.logger.info(f"Finished '{self.display_name}' after {_elapsed(started)}")
        return result

    def run_sync(self) -> Any:
        """Run on a fresh event loop and block until done."""
        return anyio.run(self.__call__)

    def __repr__(self) -> str:
        return f"Action({self.display_name!r})"


def _elapsed(started: float) -> str:
    seconds = time.perf_counter() - started
    if seconds < 1:
        return f"{seconds * 1000:.0f} ms"
    return f"{seconds:.2f} s"


async def settle(action: Callable[[], Awaitable[Any]]) -> Exception | None:
    """Run an action to completion and return its error instead of raising."""
    try:
        await action()
    except Exception as e:
        return e
    return None


# =============================================================================
# COMPOSITION
# =============================================================================


def series(
    *actions: Action,
    name: str | None = None,
    logger: TaskLogger | None = None,
) -> Action:
    """One action running ``actions`` strictly in order, stopping at the first failure."""

    async def run() -> None:
        for action in actions:
            await action()

    return Action(run, name=name, logger=logger)


def parallel(
    *actions: Action,
    name: str | None = None,
    logger: TaskLogger | None = None,
) -> Action:
    """One action running ``actions`` concurrently.

    Every started step runs to completion. A single failure is re-raised
    as-is; several failures raise ``ParallelRunError``.
    """

    async def run() -> None:
        errors: list[Exception] = []

        async def run_one(action: Action) -> None:
            error = await settle(action)
            if error is not None:
                errors.append(error)

        async with anyio.create_task_group() as tg:
            for action in actions:
                tg.start_soon(run_one, action)

        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise ParallelRunError(errors)

    return Action(run, name=name, logger=logger)
