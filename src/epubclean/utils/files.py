"""Directory traversal helpers."""

import os
from collections.abc import Iterable, Iterator
from pathlib import Path


def iter_files(root: Path, extensions: Iterable[str]) -> Iterator[Path]:
    """Yield files under ``root`` whose name ends with one of ``extensions``.

    The walk is depth-first and lazy; entries are visited in sorted order so
    repeated runs see files in the same sequence.
    """
    suffixes = tuple(extensions)
    for entry in sorted(os.scandir(root), key=lambda e: e.name):
        if entry.is_dir(follow_symlinks=False):
            yield from iter_files(Path(entry.path), suffixes)
        elif entry.name.endswith(suffixes):
            yield Path(entry.path)


def find_files(root: Path, extensions: Iterable[str]) -> list[Path]:
    """Collect every matching file under ``root`` into a list."""
    return list(iter_files(root, extensions))
