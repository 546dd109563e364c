"""Unit tests for the command line interface."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from taskweave import __version__
from taskweave.cli.main import app

runner = CliRunner()

TASKFILE = '''
from pathlib import Path

def touch():
    Path("touched.txt").write_text("yes")

def other():
    Path("other.txt").write_text("yes")

tasks = {
    "touch": touch,
    "other": other,
    "default": "touch",
}
'''


@pytest.fixture
def taskfile(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "taskfile.py"
    path.write_text(TASKFILE)
    return path


class TestCLI:
    """taskweave list / run / --version."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_list(self, taskfile: Path) -> None:
        result = runner.invoke(app, ["list", "--file", str(taskfile)])

        assert result.exit_code == 0
        assert "touch" in result.stdout
        assert "default" in result.stdout

    def test_run_default(self, taskfile: Path, tmp_path: Path) -> None:
        result = runner.invoke(app, ["run", "--file", str(taskfile)])

        assert result.exit_code == 0
        assert (tmp_path / "touched.txt").read_text() == "yes"

    def test_run_several(self, taskfile: Path, tmp_path: Path) -> None:
        result = runner.invoke(app, ["run", "touch", "other", "--series", "--file", str(taskfile)])

        assert result.exit_code == 0
        assert (tmp_path / "other.txt").exists()

    def test_unknown_task(self, taskfile: Path) -> None:
        result = runner.invoke(app, ["run", "ghost", "--file", str(taskfile)])

        assert result.exit_code == 1

    def test_invalid_taskfile(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        path = tmp_path / "taskfile.py"
        path.write_text('tasks = {"a": "ghost"}\n')

        result = runner.invoke(app, ["run", "a", "--file", str(path)])

        assert result.exit_code == 1
