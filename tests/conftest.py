"""Pytest configuration and shared fixtures."""

import os
from collections.abc import Callable, Generator, Iterable
from pathlib import Path
from typing import Any

import pytest

# Set test environment
os.environ.setdefault("TASKWEAVE_LOG_LEVEL", "DEBUG")
os.environ.setdefault("TASKWEAVE_BEEP", "false")


class RecordingLogger:
    """Collects log lines per level."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str]] = []

    def _log(self, level: str, message: str) -> None:
        self.records.append((level, message))

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._log("debug", message)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._log("info", message)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._log("warning", message)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._log("error", message)

    def messages(self, level: str | None = None) -> list[str]:
        return [m for lvl, m in self.records if level is None or lvl == level]


class FakeObserver:
    """Stands in for a filesystem observer; tests call ``trigger`` directly."""

    def __init__(self, patterns: Iterable[str], on_change: Callable[[str], None], delay: float):
        self.patterns = list(patterns)
        self.on_change = on_change
        self.delay = delay
        self.close_calls = 0

    def trigger(self, path: str | None = None) -> None:
        self.on_change(path or self.patterns[0])

    @property
    def closed(self) -> bool:
        return self.close_calls > 0

    async def close(self) -> None:
        self.close_calls += 1


class FakeObserverFactory:
    """Observer factory recording every observer it creates."""

    def __init__(self) -> None:
        self.observers: list[FakeObserver] = []

    def __call__(
        self, patterns: Iterable[str], on_change: Callable[[str], None], delay: float
    ) -> FakeObserver:
        observer = FakeObserver(patterns, on_change, delay)
        self.observers.append(observer)
        return observer

    def for_path(self, path: str) -> FakeObserver:
        return next(o for o in self.observers if path in o.patterns)


class RecordingBeeper:
    def __init__(self) -> None:
        self.tones: list[str] = []

    def success(self) -> None:
        self.tones.append("success")

    def failure(self) -> None:
        self.tones.append("failure")


@pytest.fixture
def mock_settings() -> Generator:
    """Reset cached settings around a test."""
    from taskweave.core.config import clear_settings_cache

    clear_settings_cache()

    yield

    clear_settings_cache()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def fake_observers() -> FakeObserverFactory:
    return FakeObserverFactory()


@pytest.fixture
def recording_beeper() -> RecordingBeeper:
    return RecordingBeeper()


@pytest.fixture
def birds(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Work inside a temp dir holding ``birds/owls.txt``."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "birds").mkdir()
    (tmp_path / "birds" / "owls.txt").write_text("Do owls exist?")
    return tmp_path


# Markers
def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as unit test")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
