"""Discovery of watchable files in a directory tree."""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence


def _extension(name: str) -> str:
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def is_valid_file(path: str, valid_exts: Sequence[str], exclude_dirs: Sequence[str]) -> bool:
    """Return whether *path* is a file the watcher should consider.

    A file with a valid extension is accepted regardless of the excluded
    directories; the exclusion only applies to files that would otherwise
    be rejected anyway.
    """
    parts = os.path.normpath(path).split(os.sep)
    if _extension(parts[-1]) in valid_exts:
        return True

    if any(part in exclude_dirs for part in parts[:-1]):
        return False

    return False


def _walk(path: str) -> Iterator[tuple[str, bool]]:
    is_dir = os.path.isdir(path) and not os.path.islink(path)
    os.lstat(path)  # raises if the path is missing
    yield path, is_dir
    if is_dir:
        for name in sorted(os.listdir(path)):
            yield from _walk(os.path.join(path, name))


def walk_directory_for_files(
    directory: str | os.PathLike,
    valid_exts: Sequence[str],
    exclude_dirs: Sequence[str],
) -> list[str]:
    """Return all valid files below *directory*, in lexical walk order."""
    return [
        path
        for path, is_dir in _walk(os.fspath(directory))
        if not is_dir and is_valid_file(path, valid_exts, exclude_dirs)
    ]