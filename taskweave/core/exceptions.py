"""Exception hierarchy for Taskweave.

Compile-time errors (``StructureError`` and the ``CompileError`` family)
abort a whole compile call. Run-time errors (``TransformContractError`` and
``RunError``) surface from awaiting an action.
"""

from collections.abc import Sequence


class TaskweaveError(Exception):
    """Base exception for Taskweave errors."""

    pass


# =============================================================================
# COMPILE TIME
# =============================================================================


class StructureError(TaskweaveError):
    """A raw task description has an invalid shape."""

    pass


class CompileError(TaskweaveError):
    """Normalized tasks could not be composed into actions."""

    pass


class UndefinedTaskError(CompileError):
    """An alias refers to a task name that does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Task "{name}" does not exist.')


class CircularAliasError(CompileError):
    """An alias chain revisits a name."""

    def __init__(self, chain: Sequence[str]):
        self.chain = list(chain)
        super().__init__(f"Circular aliases: {' -> '.join(self.chain)}.")


class InvalidTaskShapeError(CompileError):
    """A task has none of the known shapes."""

    pass


# =============================================================================
# RUN TIME
# =============================================================================


class TransformContractError(TaskweaveError):
    """A transform returned something other than a file record, bytes or text."""

    def __init__(self, returned: object):
        self.returned = returned
        super().__init__(
            "Transforms must return/resolve with a file record, bytes or a string, "
            f"got {type(returned).__name__}."
        )


class RunError(TaskweaveError):
    """A unit of work reported failure."""

    pass


class ParallelRunError(RunError):
    """More than one step of a parallel group failed."""

    def __init__(self, errors: Sequence[BaseException]):
        self.errors = list(errors)
        details = "; ".join(f"{type(e).__name__}: {e}" for e in self.errors)
        super().__init__(f"{len(self.errors)} parallel steps failed: {details}")
