"""Watching - filesystem observers and the synthesized watch task."""

from taskweave.watch.beep import Beeper
from taskweave.watch.observer import FileObserver, observe
from taskweave.watch.synthesizer import WATCH_TASK_NAME, WatchSession, WatchSynthesizer

__all__ = [
    "Beeper",
    "FileObserver",
    "WATCH_TASK_NAME",
    "WatchSession",
    "WatchSynthesizer",
    "observe",
]
