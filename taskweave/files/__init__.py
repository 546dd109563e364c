"""File streaming - records, sources, sinks and transform pipelines."""

from taskweave.files.pipeline import PipelineBuilder, Stage, stage
from taskweave.files.records import FileRecord
from taskweave.files.rename import PathParts
from taskweave.files.streams import glob_parent, has_magic, open_files, single, write_to

__all__ = [
    "FileRecord",
    "PathParts",
    "PipelineBuilder",
    "Stage",
    "glob_parent",
    "has_magic",
    "open_files",
    "single",
    "stage",
    "write_to",
]
