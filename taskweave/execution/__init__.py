"""Execution primitives - actions, calling conventions, series and parallel."""

from taskweave.execution.actions import (
    ANONYMOUS,
    Action,
    Convention,
    invoke,
    parallel,
    series,
    settle,
)

__all__ = [
    "ANONYMOUS",
    "Action",
    "Convention",
    "invoke",
    "parallel",
    "series",
    "settle",
]
