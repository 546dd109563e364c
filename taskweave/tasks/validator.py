"""Structural checks for raw task descriptions."""

import os
from collections.abc import Mapping
from typing import Any

from taskweave.core.exceptions import StructureError
from taskweave.files.records import FileRecord

COMPOSITE_KEYS = ("task", "series", "parallel")


def _present(description: Mapping[str, Any], key: str) -> bool:
    return description.get(key) is not None


def _valid_src(src: Any) -> bool:
    if isinstance(src, (str, os.PathLike, FileRecord)):
        return True
    if isinstance(src, (list, tuple)):
        return bool(src) and all(isinstance(p, (str, os.PathLike)) for p in src)
    return False


def _valid_watch(watch: Any) -> bool:
    if isinstance(watch, (bool, str, os.PathLike)):
        return True
    if isinstance(watch, (list, tuple)):
        return all(isinstance(p, (str, os.PathLike)) for p in watch)
    return False


def validate_description(description: Any) -> None:
    """Check a raw task description before it is normalized.

    Args:
        description: A task name, a callable, or a mapping.

    Raises:
        StructureError: If the description is malformed.

    Example:
        >>> validate_description({"series": [], "parallel": []})
        Traceback (most recent call last):
        StructureError: A task can only have one of .task/.series/.parallel properties.
    """
    if isinstance(description, str) or callable(description):
        return
    if not isinstance(description, Mapping):
        raise StructureError("A task must be a string, function, or object.")

    composites = [key for key in COMPOSITE_KEYS if _present(description, key)]
    src = description.get("src")

    if len(composites) > 1:
        raise StructureError(
            "A task can only have one of .task/.series/.parallel properties."
        )

    if not src and not composites:
        raise StructureError("A task must do something.")

    if src and composites:
        raise StructureError(
            "A task can't have both .src and .task/.series/.parallel properties."
        )

    if src and not _valid_src(src):
        raise StructureError("Task's .src must be a path string or a file record.")

    watch = description.get("watch")
    if watch is True and not src:
        raise StructureError("No path given to watch.")
    if watch is not None and not _valid_watch(watch):
        raise StructureError("Task's .watch must be a boolean or path string(s).")

    for key in ("series", "parallel"):
        if _present(description, key) and not isinstance(description[key], (list, tuple)):
            raise StructureError(f"Task's .{key} must be a list of tasks.")

    transforms = description.get("transforms")
    if transforms is not None:
        if not isinstance(transforms, (list, tuple)) or not all(
            callable(t) for t in transforms
        ):
            raise StructureError("Task's .transforms must be a list of functions.")
