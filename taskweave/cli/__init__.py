"""CLI - Typer command-line interface for Taskweave."""

from taskweave.cli.main import app

__all__ = ["app"]
