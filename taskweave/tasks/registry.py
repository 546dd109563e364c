"""Task registry - named actions available to runners such as the CLI."""

from collections.abc import Iterator

from taskweave.execution.actions import Action


class TaskRegistry:
    """
    Mapping of task name to action.

    Registries are plain values: callers create one, hand it to the compiler,
    and keep it. Nothing is shared process-wide.

    Example:
        >>> registry = TaskRegistry()
        >>> registry.register("build", action)
        >>> registry.lookup("build") is action
        True
    """

    def __init__(self) -> None:
        self._tasks: dict[str, Action] = {}

    def reset(self) -> None:
        """Forget every registered action."""
        self._tasks = {}

    def register(self, name: str, action: Action) -> None:
        """Register ``action`` under ``name``, replacing any previous one."""
        self._tasks[name] = action

    def lookup(self, name: str) -> Action | None:
        return self._tasks.get(name)

    def tasks(self) -> dict[str, Action]:
        return dict(self._tasks)

    def names(self) -> list[str]:
        return sorted(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

    def __iter__(self) -> Iterator[str]:
        return iter(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)
