"""Main CLI entry point using Typer."""

import importlib.util
from collections.abc import Awaitable, Callable
from pathlib import Path
from types import ModuleType
from typing import Any

import anyio
import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from taskweave import __version__
from taskweave.core.config import get_settings
from taskweave.core.exceptions import TaskweaveError
from taskweave.core.logging import configure_logging
from taskweave.execution.actions import Action
from taskweave.tasks.compiler import TaskCompiler
from taskweave.tasks.registry import TaskRegistry

app = typer.Typer(
    name="taskweave",
    help="Taskweave - declarative task orchestration",
    add_completion=True,
    rich_markup_mode="rich",
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Taskweave[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Taskweave - compile a taskfile into runnable tasks.
    """
    pass


def load_taskfile(path: Path) -> ModuleType:
    """Import a taskfile module from ``path``.

    Raises:
        typer.BadParameter: If the file is missing or defines no ``tasks``.
    """
    if not path.is_file():
        raise typer.BadParameter(f"Taskfile not found: {path}")

    spec = importlib.util.spec_from_file_location(path.stem, path)
    if spec is None or spec.loader is None:
        raise typer.BadParameter(f"Cannot import taskfile: {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)

    if not isinstance(getattr(module, "tasks", None), dict):
        raise typer.BadParameter(f"Taskfile {path} must define a `tasks` dict")
    return module


def compile_taskfile(path: Path, beep: bool | None = None) -> TaskRegistry:
    module = load_taskfile(path)
    compiler = TaskCompiler(registry=TaskRegistry())
    compiler.compile(
        module.tasks,
        template=getattr(module, "template", None),
        beep=beep,
        register=True,
    )
    return compiler.registry


async def run_actions(actions: list[Action], in_series: bool) -> None:
    """Run actions; if any returns a teardown function, stay alive until interrupted."""
    teardowns: list[Callable[[], Awaitable[Any]]] = []

    async def run_one(action: Action) -> None:
        result = await action()
        if callable(result):
            teardowns.append(result)

    if in_series:
        for action in actions:
            await run_one(action)
    else:
        async with anyio.create_task_group() as tg:
            for action in actions:
                tg.start_soon(run_one, action)

    if not teardowns:
        return

    try:
        await anyio.sleep_forever()
    finally:
        with anyio.CancelScope(shield=True):
            for teardown in teardowns:
                await teardown()


def _taskfile_option() -> Any:
    return typer.Option(
        None,
        "--file",
        "-f",
        help="Taskfile defining `tasks` (defaults to TASKWEAVE_TASKFILE)",
    )


@app.command("list")
def list_tasks(
    taskfile: Path | None = _taskfile_option(),
) -> None:
    """
    List tasks defined by the taskfile.
    """
    configure_logging()
    path = taskfile or Path(get_settings().taskweave_taskfile)

    try:
        registry = compile_taskfile(path, beep=False)
    except TaskweaveError as e:
        console.print(f"[red]Invalid taskfile: {e}[/red]")
        raise typer.Exit(code=1)

    table = Table(title=f"Tasks in {path}")
    table.add_column("Task", style="cyan")
    table.add_column("Display name")
    for name in registry.names():
        table.add_row(name, registry.lookup(name).display_name)
    console.print(table)


@app.command()
def run(
    names: list[str] = typer.Argument(None, help="Tasks to run (default: `default`)"),
    taskfile: Path | None = _taskfile_option(),
    in_series: bool = typer.Option(
        False,
        "--series",
        "-s",
        help="Run the given tasks one after another instead of concurrently",
    ),
    beep: bool | None = typer.Option(
        None,
        "--beep/--no-beep",
        help="Beep when watch-triggered runs finish",
    ),
) -> None:
    """
    Run tasks from the taskfile.

    Example:
        taskweave run build watch -f taskfile.py
    """
    configure_logging()
    path = taskfile or Path(get_settings().taskweave_taskfile)
    names = names or ["default"]

    try:
        registry = compile_taskfile(path, beep=beep)
    except TaskweaveError as e:
        console.print(f"[red]Invalid taskfile: {e}[/red]")
        raise typer.Exit(code=1)

    missing = [name for name in names if name not in registry]
    if missing:
        console.print(f"[red]Task never defined: {', '.join(missing)}[/red]")
        raise typer.Exit(code=1)

    actions = [registry.lookup(name) for name in names]
    try:
        anyio.run(run_actions, actions, in_series)
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception as e:
        console.print(f"[bold red]Failed: {e}[/bold red]")
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()
