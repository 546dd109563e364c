"""
Filesystem observer built on watchdog.

Watchdog delivers events on its own thread; they are filtered against the
watched patterns and handed to the event loop that created the observer.
"""

import asyncio
import os
from collections.abc import Callable, Iterable
from pathlib import Path

import anyio
from loguru import logger
from watchdog.events import (
    EVENT_TYPE_CLOSED,
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.utils import platform

from taskweave.files.streams import glob_match, glob_parent, has_magic

ChangeCallback = Callable[[str], None]

WATCHED_EVENTS = frozenset(
    {EVENT_TYPE_CREATED, EVENT_TYPE_MODIFIED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED}
)
CLOSE_WATCHED_EVENTS = frozenset({EVENT_TYPE_CLOSED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED})


class _PatternHandler(FileSystemEventHandler):
    """Forward file events matching any pattern to ``forward``.

    Where the platform reports write-close events (inotify), a write is
    reported once, when the writer closes the file; created and modified
    events are skipped since a close always follows them.
    """

    def __init__(
        self,
        patterns: list[str],
        forward: ChangeCallback,
        close_events: bool | None = None,
    ):
        self.patterns = patterns
        self._forward = forward
        if close_events is None:
            close_events = platform.is_linux()
        self.event_types = CLOSE_WATCHED_EVENTS if close_events else WATCHED_EVENTS

    def matches(self, path: str) -> bool:
        for pattern in self.patterns:
            if has_magic(pattern):
                if glob_match(path, pattern):
                    return True
            elif path == pattern or path.startswith(pattern.rstrip(os.sep) + os.sep):
                return True
        return False

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in self.event_types:
            return
        paths = [os.fsdecode(event.src_path)]
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            paths.insert(0, os.fsdecode(dest_path))
        for path in paths:
            if self.matches(path):
                self._forward(path)
                return



class FileObserver:
    """
    Watches glob patterns and calls ``on_change(path)`` on the event loop.

    With ``delay > 0`` events for the same path are debounced; with zero
    delay every event is delivered.

    Example:
        >>> observer = FileObserver(["src/**/*.py"], print)
        >>> observer.start()
        >>> await observer.close()
    """

    def __init__(
        self,
        patterns: Iterable[str],
        on_change: ChangeCallback,
        delay: float = 0.0,
        cwd: str | os.PathLike | None = None,
    ):
        root = Path(cwd) if cwd is not None else Path.cwd()
        self.patterns = [os.fspath(p) for p in patterns]
        self._absolute = [
            p if os.path.isabs(p) else os.path.normpath(str(root / p)) for p in self.patterns
        ]
        self.on_change = on_change
        self.delay = delay
        self._loop: asyncio.AbstractEventLoop | None = None
        self._observer: Observer | None = None
        self._pending: dict[str, asyncio.TimerHandle] = {}
        self._closed = False
        self._stopped = asyncio.Event()

    def _roots(self) -> dict[str, bool]:
        """Directory to schedule -> whether it needs recursive watching."""
        roots: dict[str, bool] = {}
        for pattern in self._absolute:
            if has_magic(pattern):
                root = glob_parent(pattern)
                recursive = "**" in pattern or has_magic(os.path.dirname(pattern))
            elif os.path.isdir(pattern):
                root, recursive = pattern, True
            else:
                root, recursive = os.path.dirname(pattern), False
            while not os.path.isdir(root) and os.path.dirname(root) != root:
                root, recursive = os.path.dirname(root), True
            roots[root] = roots.get(root, False) or recursive
        return roots

    def start(self) -> "FileObserver":
        self._loop = asyncio.get_running_loop()
        handler = _PatternHandler(self._absolute, self._threadsafe_dispatch)
        self._observer = Observer()
        for root, recursive in self._roots().items():
            self._observer.schedule(handler, root, recursive=recursive)
            logger.debug(f"Observing {root} (recursive={recursive})")
        self._observer.start()
        return self

    def _threadsafe_dispatch(self, path: str) -> None:
        if self._loop is not None and not self._closed:
            self._loop.call_soon_threadsafe(self._dispatch, path)

    def _dispatch(self, path: str) -> None:
        if self._closed:
            return
        if self.delay <= 0:
            self.on_change(path)
            return
        handle = self._pending.pop(path, None)
        if handle is not None:
            handle.cancel()
        self._pending[path] = self._loop.call_later(self.delay, self._fire, path)

    def _fire(self, path: str) -> None:
        self._pending.pop(path, None)
        if not self._closed:
            self.on_change(path)

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        """Stop observing; returns once the watchdog thread has exited."""
        if self._closed:
            await self._stopped.wait()
            return
        self._closed = True
        for handle in self._pending.values():
            handle.cancel()
        self._pending.clear()
        if self._observer is not None:
            self._observer.stop()
            await anyio.to_thread.run_sync(self._observer.join)
        self._stopped.set()


def observe(
    patterns: Iterable[str],
    on_change: ChangeCallback,
    delay: float = 0.0,
) -> FileObserver:
    """Start observing ``patterns``; must be called from a running event loop."""
    return FileObserver(patterns, on_change, delay=delay).start()
