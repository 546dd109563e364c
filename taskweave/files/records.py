"""File records flowing through pipelines."""

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FileRecord(BaseModel):
    """A file travelling through a pipeline: location plus contents.

    ``base`` is the directory ``relative`` is computed against; destinations
    write to ``<dest>/<relative>``.

    Example:
        >>> record = FileRecord(path="src/a.txt", base="src", contents=b"hi")
        >>> record.relative
        'a.txt'
    """

    model_config = ConfigDict(frozen=False, validate_assignment=True)

    path: Path = Field(description="Absolute (or cwd-relative) file path")
    base: Path | None = Field(
        default=None,
        description="Base directory; defaults to the path's parent",
    )
    cwd: Path = Field(default_factory=Path.cwd, description="Working directory")
    contents: bytes = Field(default=b"", description="File contents")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Free-form data transforms may attach",
    )

    @field_validator("contents", mode="before")
    @classmethod
    def encode_text(cls, v: Any) -> Any:
        """Accept text contents and store them UTF-8 encoded."""
        if isinstance(v, str):
            return v.encode("utf-8")
        if isinstance(v, (bytearray, memoryview)):
            return bytes(v)
        return v

    def model_post_init(self, __context: Any) -> None:
        if not self.path.is_absolute():
            self.path = self.cwd / self.path
        if self.base is None:
            self.base = self.path.parent
        elif not self.base.is_absolute():
            self.base = self.cwd / self.base

    @property
    def relative(self) -> str:
        """Path relative to ``base``."""
        return os.path.relpath(self.path, self.base)

    @property
    def dirname(self) -> str:
        return str(self.path.parent)

    @property
    def basename(self) -> str:
        return self.path.name

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def extname(self) -> str:
        return self.path.suffix

    @property
    def text(self) -> str:
        """Contents decoded as UTF-8."""
        return self.contents.decode("utf-8")

    def clone(self) -> "FileRecord":
        """Deep copy, so a run can mutate the record freely."""
        return self.model_copy(deep=True)
