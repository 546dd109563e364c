"""File sources and destinations.

Streams are async iterators of ``FileRecord``. A stage is any callable that
takes a stream and returns a new one.
"""

import fnmatch
import glob
import os
from collections.abc import AsyncIterator, Callable, Iterable
from pathlib import Path, PurePath

import anyio
from loguru import logger

from taskweave.files.records import FileRecord

FileStream = AsyncIterator[FileRecord]
StreamStage = Callable[[FileStream], FileStream]


def has_magic(pattern: str) -> bool:
    return any(ch in pattern for ch in "*?[")


def glob_parent(pattern: str) -> str:
    """Return the directory part of a pattern that precedes any wildcard.

    Example:
        >>> glob_parent("src/**/*.js")
        'src'
        >>> glob_parent("birds/owls.txt")
        'birds'
    """
    path = PurePath(pattern)
    prefix: list[str] = []
    for part in path.parts:
        if has_magic(part):
            break
        prefix.append(part)
    else:
        return str(path.parent)
    return str(PurePath(*prefix)) if prefix else "."


def glob_match(path: str | os.PathLike, pattern: str | os.PathLike) -> bool:
    """Whether ``path`` matches ``pattern`` the way ``open_files`` expands it.

    ``**`` as a whole component spans zero or more directories; other
    wildcards stay within one component and skip dotfiles.

    Example:
        >>> glob_match("src/a.txt", "src/**/*.txt")
        True
        >>> glob_match("src/lib/a.txt", "src/*.txt")
        False
    """
    return _match_parts(PurePath(path).parts, PurePath(pattern).parts)


def _match_parts(parts: tuple[str, ...], pattern: tuple[str, ...]) -> bool:
    if not pattern:
        return not parts
    head, rest = pattern[0], pattern[1:]
    if head == "**":
        return any(_match_parts(parts[i:], rest) for i in range(len(parts) + 1))
    if not parts:
        return False
    name = parts[0]
    if has_magic(head):
        if name.startswith(".") and not head.startswith("."):
            return False
        matched = fnmatch.fnmatch(name, head)
    else:
        matched = name == head
    return matched and _match_parts(parts[1:], rest)


def _as_patterns(patterns: str | os.PathLike | Iterable[str]) -> list[str]:
    if isinstance(patterns, (str, os.PathLike)):
        return [os.fspath(patterns)]
    return [os.fspath(p) for p in patterns]


def _expand(pattern: str, cwd: Path) -> list[Path]:
    matches = glob.glob(pattern, root_dir=cwd, recursive=True)
    return sorted(cwd / m for m in matches if (cwd / m).is_file())


async def open_files(
    patterns: str | os.PathLike | Iterable[str],
    base: str | os.PathLike | None = None,
    cwd: str | os.PathLike | None = None,
) -> FileStream:
    """Yield a record per file matching ``patterns``.

    Patterns starting with ``!`` exclude matches. A pattern without
    wildcards must name an existing file.

    Args:
        patterns: Glob pattern, path, or list of them.
        base: Base directory for every record (defaults to each pattern's glob parent).
        cwd: Directory relative patterns are resolved against.

    Raises:
        FileNotFoundError: If a pattern without wildcards matches nothing.
    """
    root = Path(cwd) if cwd is not None else Path.cwd()
    items = _as_patterns(patterns)
    positive = [p for p in items if not p.startswith("!")]
    excluded: set[Path] = set()
    for p in items:
        if p.startswith("!"):
            excluded.update(_expand(p[1:], root))

    seen: set[Path] = set()
    for pattern in positive:
        matches = _expand(pattern, root)
        if not matches and not has_magic(pattern):
            raise FileNotFoundError(f"File not found with singular glob: {pattern}")

        record_base = Path(base) if base else Path(glob_parent(pattern))
        if not record_base.is_absolute():
            record_base = root / record_base

        for path in matches:
            if path in seen or path in excluded:
                continue
            seen.add(path)
            contents = await anyio.Path(path).read_bytes()
            logger.debug(f"Read {path}")
            yield FileRecord(path=path, base=record_base, cwd=root, contents=contents)


async def single(record: FileRecord) -> FileStream:
    """A stream that emits one record and ends."""
    yield record


def write_to(dest: str | os.PathLike) -> StreamStage:
    """Stage writing each record to ``<dest>/<relative>``.

    Written records are re-based on the destination directory.
    """

    async def sink(stream: FileStream) -> FileStream:
        async for record in stream:
            dest_dir = Path(dest)
            if not dest_dir.is_absolute():
                dest_dir = record.cwd / dest_dir
            target = dest_dir / record.relative
            await anyio.Path(target.parent).mkdir(parents=True, exist_ok=True)
            await anyio.Path(target).write_bytes(record.contents)
            logger.debug(f"Wrote {target}")
            record.base = dest_dir
            record.path = target
            yield record

    return sink
