"""Rename stage for pipelines."""

import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict

from taskweave.files.records import FileRecord
from taskweave.files.streams import FileStream, StreamStage

RenameSpec = str | Mapping[str, Any] | Callable[..., Any]


class PathParts(BaseModel):
    """A record's relative path split into editable parts.

    Example:
        >>> PathParts.from_relative("css/site.scss")
        PathParts(dirname='css', basename='site', extname='.scss')
    """

    model_config = ConfigDict(frozen=False)

    dirname: str = "."
    basename: str = ""
    extname: str = ""

    @classmethod
    def from_relative(cls, relative: str) -> "PathParts":
        path = Path(relative)
        dirname = str(path.parent)
        return cls(dirname=dirname, basename=path.stem, extname=path.suffix)

    def to_relative(self) -> str:
        return os.path.normpath(os.path.join(self.dirname, self.basename + self.extname))


def _apply_mapping(parts: PathParts, spec: Mapping[str, Any]) -> PathParts:
    updated = parts.model_copy(
        update={k: spec[k] for k in ("dirname", "basename", "extname") if k in spec}
    )
    updated.basename = f"{spec.get('prefix', '')}{updated.basename}{spec.get('suffix', '')}"
    return updated


def renamed_relative(record: FileRecord, spec: RenameSpec) -> str:
    """Compute the new relative path of ``record`` under ``spec``."""
    if isinstance(spec, str):
        return spec

    parts = PathParts.from_relative(record.relative)
    if isinstance(spec, Mapping):
        return _apply_mapping(parts, spec).to_relative()

    result = spec(parts, record)
    if isinstance(result, PathParts):
        parts = result
    elif isinstance(result, Mapping):
        parts = PathParts(**{**parts.model_dump(), **result})
    return parts.to_relative()


def rename(spec: RenameSpec) -> StreamStage:
    """Stage moving each record to a new path under its base.

    Args:
        spec: New relative path, a mapping of part overrides
            (``dirname``, ``basename``, ``extname``, ``prefix``, ``suffix``),
            or a callable receiving ``(PathParts, FileRecord)`` that edits the
            parts in place or returns new ones.
    """

    async def stage(stream: FileStream) -> FileStream:
        async for record in stream:
            record.path = Path(record.base) / renamed_relative(record, spec)
            yield record

    return stage
