"""Normalizer - turns raw task descriptions into task models."""

import os
from collections.abc import Callable, Mapping
from typing import Any
from uuid import uuid4

from loguru import logger

from taskweave.core.exceptions import StructureError
from taskweave.execution.actions import convention_of
from taskweave.files.records import FileRecord
from taskweave.tasks.models import (
    AliasTask,
    CallbackTask,
    ParallelTask,
    PipelineTask,
    SeriesTask,
    Task,
    WrappedTask,
)
from taskweave.tasks.validator import COMPOSITE_KEYS, validate_description

DEFAULT_TEMPLATE: dict[str, Any] = {"transforms": [], "dest": "."}


def expand(target: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of ``target`` with keys it lacks taken from ``defaults``."""
    merged = dict(target)
    for key, value in defaults.items():
        if key not in merged:
            merged[key] = value
    return merged


def infer_name(fn: Callable[..., Any]) -> str | None:
    """Best-effort task name from a function; lambdas and partials stay anonymous."""
    name = getattr(fn, "__name__", None)
    if not name or name == "<lambda>":
        return None
    return name


def _paths(value: Any) -> list[str]:
    if isinstance(value, FileRecord):
        return [str(value.path)]
    if isinstance(value, (str, os.PathLike)):
        return [os.fspath(value)]
    return [os.fspath(p) for p in value]


class Normalizer:
    """
    Normalize raw task descriptions against a pipeline template.

    One normalizer serves one compile pass: the same raw mapping object
    reached from several places yields one shared task. The template applies
    to top-level pipelines only; nested pipelines get the bare defaults.

    Example:
        >>> normalizer = Normalizer(template={"dest": "build"})
        >>> task = normalizer.normalize({"src": "src/*.txt"}, name="copy")
        >>> task.dest
        'build'
    """

    def __init__(
        self,
        template: Mapping[str, Any] | None = None,
        defaults: Mapping[str, Any] | None = None,
    ):
        self.defaults = expand(defaults or {}, DEFAULT_TEMPLATE)
        self.template = expand(template or {}, self.defaults)
        self._seen: dict[int, tuple[Mapping[str, Any], Task]] = {}
        self._active: set[int] = set()

    def normalize(self, raw: Any, name: str | None = None, nested: bool = False) -> Task:
        """Validate and normalize one raw description.

        Args:
            raw: Task name, callable, or mapping.
            name: Explicit name (the task table key for top-level tasks).
            nested: Whether raw sits inside another task (no template applied).

        Returns:
            The normalized task.

        Raises:
            StructureError: If the description (or a nested one) is malformed.
        """
        validate_description(raw)

        if isinstance(raw, str):
            return AliasTask(name=name or raw, target=raw)

        if isinstance(raw, Mapping):
            return self._normalize_mapping(raw, name, nested)

        return CallbackTask(
            name=name or infer_name(raw),
            fn=raw,
            convention=convention_of(raw),
        )

    def _normalize_mapping(
        self, raw: Mapping[str, Any], name: str | None, nested: bool
    ) -> Task:
        key = id(raw)
        if key in self._active:
            raise StructureError("A task cannot contain itself.")
        cached = self._seen.get(key)
        if cached is not None and cached[0] is raw:
            task = cached[1]
            if name and not task.name:
                task.name = name
            elif name and name != task.name:
                # Same steps under another key; watched once, via the first key.
                return task.model_copy(update={"uid": str(uuid4()), "name": name, "watch": None})
            return task

        self._active.add(key)
        try:
            task = self._build(raw, name, nested)
        finally:
            self._active.discard(key)

        self._seen[key] = (raw, task)
        return task

    def _build(self, raw: Mapping[str, Any], name: str | None, nested: bool) -> Task:
        name = name or raw.get("name")
        is_pipeline = not any(raw.get(k) is not None for k in COMPOSITE_KEYS)
        template = self.defaults if nested else self.template
        description = expand(raw, template) if is_pipeline else dict(raw)

        watch = description.get("watch")
        if watch is True:
            watch = description["src"]
        watch_paths = _paths(watch) if watch else None

        if is_pipeline:
            src = description["src"]
            if not isinstance(src, FileRecord):
                src = _paths(src)
                src = src[0] if len(src) == 1 else src
            base = description.get("base")
            return PipelineTask(
                name=name,
                watch=watch_paths,
                src=src,
                transforms=list(description.get("transforms") or []),
                rename=description.get("rename"),
                dest=os.fspath(description["dest"]) if description.get("dest") else None,
                base=os.fspath(base) if base else None,
            )

        if description.get("task") is not None:
            inner = self.normalize(description["task"], nested=True)
            return WrappedTask(name=name or inner.name, watch=watch_paths, inner=inner)

        if description.get("series") is not None:
            steps = [self.normalize(step, nested=True) for step in description["series"]]
            return SeriesTask(name=name, watch=watch_paths, steps=steps)

        steps = [self.normalize(step, nested=True) for step in description["parallel"]]
        return ParallelTask(name=name, watch=watch_paths, steps=steps)


def normalize_table(
    tasks: Mapping[str, Any],
    template: Mapping[str, Any] | None = None,
    defaults: Mapping[str, Any] | None = None,
) -> dict[str, Task]:
    """Normalize every entry of a raw task mapping into a fresh table."""
    normalizer = Normalizer(template, defaults)
    table = {name: normalizer.normalize(raw, name) for name, raw in tasks.items()}
    logger.debug(f"Normalized {len(table)} tasks")
    return table
