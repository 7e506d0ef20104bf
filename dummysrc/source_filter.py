"""Two-phase filter that keeps only files which must survive verbatim.

Phase 1 collects the interesting paths (the lock file and every auxiliary
config file). Phase 2 walks the tree and keeps a directory only when it is an
ancestor of an interesting path, and a file only when it is one. Pruned
directories are never descended into, so unrelated files or new directories
elsewhere in the tree cannot change the result.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import AbstractSet, List, Set

from .discovery import iter_tree
from .models import DiscoveryResult, FilteredTree


def collect_interesting(discovery: DiscoveryResult, lock_file: Path | None) -> frozenset[str]:
    """Phase 1: the lock file (when inside the tree) plus every config file."""
    interesting: Set[str] = set(discovery.configs)
    if lock_file is not None and Path(lock_file).is_file():
        rel_path = relative_within(Path(discovery.root), lock_file)
        if rel_path is not None:
            interesting.add(rel_path)
    return frozenset(interesting)


def relative_within(root: Path, path: Path) -> str | None:
    """Return ``path`` relative to ``root`` as POSIX text, or None when outside it."""
    absolute = Path(os.path.abspath(path))
    # Resolve the directory only; a symlinked lock file keeps its own location.
    absolute = absolute.parent.resolve() / absolute.name
    if absolute == root or not absolute.is_relative_to(root):
        return None
    return absolute.relative_to(root).as_posix()


def ancestor_index(paths: AbstractSet[str]) -> frozenset[str]:
    """Return every proper ancestor directory of ``paths``, root excluded."""
    ancestors: Set[str] = set()
    for path in paths:
        parts = path.split("/")[:-1]
        for depth in range(1, len(parts) + 1):
            ancestors.add("/".join(parts[:depth]))
    return frozenset(ancestors)


def filter_tree(root: Path, interesting: AbstractSet[str]) -> FilteredTree:
    """Phase 2: select the directories and files to keep from ``root``."""
    root_path = Path(root)
    ancestors = ancestor_index(interesting)
    directories: Set[str] = set()
    files: Set[str] = set()

    for dirpath, dirnames, filenames in iter_tree(root_path):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root_path).as_posix() if current_dir != root_path else ""

        kept: List[str] = []
        for name in dirnames:
            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            if rel_path in ancestors:
                kept.append(name)
                directories.add(rel_path)
        dirnames[:] = sorted(kept)

        for filename in filenames:
            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if rel_path in interesting:
                files.add(rel_path)

    return FilteredTree(directories=frozenset(directories), files=frozenset(files))


def copy_filtered(root: Path, filtered: FilteredTree, out: Path) -> List[str]:
    """Materialize ``filtered`` under ``out`` and return the copied file paths."""
    for rel_dir in sorted(filtered.directories):
        (out / rel_dir).mkdir(parents=True, exist_ok=True)
    copied = sorted(filtered.files)
    for rel_path in copied:
        destination = out / rel_path
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(Path(root) / rel_path, destination)
    return copied


__all__ = [
    "ancestor_index",
    "collect_interesting",
    "copy_filtered",
    "filter_tree",
    "relative_within",
]
