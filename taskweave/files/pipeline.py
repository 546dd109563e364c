"""Pipeline builder - turns a pipeline task into a file stream.

A transform is called as ``transform(contents, record)`` and returns (or
resolves with) a replacement ``FileRecord``, ``bytes`` or ``str``. Stream
stages wrapped with ``Stage`` are piped as-is.
"""

import inspect
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from loguru import logger

from taskweave.core.exceptions import TransformContractError
from taskweave.files.records import FileRecord
from taskweave.files.rename import rename
from taskweave.files.streams import FileStream, StreamStage, open_files, single, write_to

if TYPE_CHECKING:
    from taskweave.tasks.models import PipelineTask

Transform = Callable[[bytes, FileRecord], Any]


class Stage:
    """Marks a callable as a stream stage rather than a per-file transform."""

    def __init__(self, fn: StreamStage, name: str | None = None):
        self.fn = fn
        self.__name__ = name or getattr(fn, "__name__", "stage")

    def __call__(self, stream: FileStream) -> FileStream:
        return self.fn(stream)

    def __repr__(self) -> str:
        return f"Stage({self.__name__})"


def stage(fn: StreamStage) -> Stage:
    """Decorator form of ``Stage``."""
    return Stage(fn)


def coerce_result(result: Any, record: FileRecord) -> FileRecord:
    """Fold a transform's return value into a file record.

    Raises:
        TransformContractError: If the value is not a record, bytes or text.
    """
    if isinstance(result, FileRecord):
        return result
    if isinstance(result, (bytes, bytearray, memoryview)):
        record.contents = bytes(result)
        return record
    if isinstance(result, str):
        record.contents = result.encode("utf-8")
        return record
    raise TransformContractError(result)


async def apply_transform(transform: Transform, record: FileRecord) -> FileRecord:
    result = transform(record.contents, record)
    if inspect.isawaitable(result):
        result = await result
    return coerce_result(result, record)


def pluginate(transform: Transform) -> StreamStage:
    """Lift a per-file transform into a stream stage."""

    async def run(stream: FileStream) -> FileStream:
        async for record in stream:
            yield await apply_transform(transform, record)

    return run


class PipelineBuilder:
    """
    Build the file stream described by a pipeline task.

    Source, then each transform in order, then rename, then destination.

    Example:
        >>> builder = PipelineBuilder(task)
        >>> records = await builder.run()
    """

    def __init__(self, task: "PipelineTask"):
        self.task = task

    def source(self) -> FileStream:
        src = self.task.src
        if isinstance(src, FileRecord):
            return single(src.clone())
        return open_files(src, base=self.task.base or None)

    def build(self) -> FileStream:
        stream = self.source()

        for transform in self.task.transforms:
            if isinstance(transform, Stage):
                stream = transform(stream)
            else:
                stream = pluginate(transform)(stream)

        if self.task.rename:
            stream = rename(self.task.rename)(stream)

        if self.task.dest:
            stream = write_to(self.task.dest)(stream)

        return stream

    async def run(self) -> list[FileRecord]:
        """Drain the pipeline and return the records that came out of it."""
        records = [record async for record in self.build()]
        logger.debug(f"Pipeline '{self.task.display_name}' processed {len(records)} files")
        return records
