"""Unit tests for settings."""

import pytest

from taskweave.core.config import Settings, clear_settings_cache, get_settings


class TestSettings:
    """Settings loading."""

    def test_defaults(self, mock_settings: None, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default values."""
        monkeypatch.delenv("TASKWEAVE_BEEP", raising=False)
        settings = Settings(_env_file=None)

        assert settings.taskweave_beep is False
        assert settings.taskweave_watch_delay == 0.0
        assert settings.taskweave_default_dest == "."
        assert settings.taskweave_taskfile == "taskfile.py"

    def test_environment(self, mock_settings: None, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test values read from the environment."""
        monkeypatch.setenv("TASKWEAVE_BEEP", "true")
        monkeypatch.setenv("TASKWEAVE_WATCH_DELAY", "0.25")

        settings = get_settings()

        assert settings.taskweave_beep is True
        assert settings.taskweave_watch_delay == 0.25

    def test_cached(self, mock_settings: None) -> None:
        """Test that settings are cached until cleared."""
        first = get_settings()

        assert get_settings() is first
        clear_settings_cache()
        assert get_settings() is not first

    def test_validation(self) -> None:
        """Test that negative delays are rejected."""
        with pytest.raises(ValueError):
            Settings(taskweave_watch_delay=-1)
