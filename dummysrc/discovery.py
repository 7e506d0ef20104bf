"""Locate manifests and auxiliary config files beneath a source root."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator, List, NoReturn, Tuple

from .config import DummySrcConfig
from .errors import TraversalError
from .logging import get_logger
from .models import DiscoveryResult

logger = get_logger("discovery")


def _raise_traversal(exc: OSError) -> NoReturn:
    raise TraversalError(exc.filename or "<unknown>", f"directory is not readable: {exc.strerror}") from exc


def _is_readable(path: Path) -> bool:
    return os.access(path, os.R_OK)


def iter_tree(root: Path) -> Iterator[Tuple[str, List[str], List[str]]]:
    """Yield ``os.walk`` entries, raising TraversalError on unreadable directories."""
    return os.walk(root, onerror=_raise_traversal)


def discover(
    root: Path,
    config: DummySrcConfig | None = None,
    *,
    exclude: Iterable[Path] = (),
) -> DiscoveryResult:
    """Walk ``root`` once and return every manifest and config file path.

    ``exclude`` lists absolute directories (such as an output directory nested
    in the tree) that are never descended into.
    """
    root_path = Path(root).expanduser().resolve()
    if not root_path.exists():
        raise TraversalError(root_path, "source tree not found")
    if not root_path.is_dir():
        raise TraversalError(root_path, "source tree is not a directory")

    cfg = config or DummySrcConfig(root=root_path)
    excluded_names = set(cfg.exclude_dirs)
    excluded_paths = {Path(path).resolve() for path in exclude}
    config_names = set(cfg.config_names)

    result = DiscoveryResult(root=str(root_path))
    for dirpath, dirnames, filenames in iter_tree(root_path):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root_path).as_posix() if current_dir != root_path else ""

        dirnames[:] = sorted(
            name
            for name in dirnames
            if name not in excluded_names and (current_dir / name) not in excluded_paths
        )

        in_config_dir = current_dir != root_path and current_dir.name == cfg.config_dir
        for filename in sorted(filenames):
            if filename == cfg.manifest_name:
                bucket = result.manifests
            elif in_config_dir and filename in config_names:
                bucket = result.configs
            else:
                continue

            rel_path = f"{rel_dir}/{filename}" if rel_dir else filename
            if not _is_readable(current_dir / filename):
                logger.warning("Skipping unreadable file %s", rel_path)
                result.skipped.append(rel_path)
                continue
            bucket.append(rel_path)

    logger.debug(
        "Discovered %d manifests and %d config files under %s",
        len(result.manifests),
        len(result.configs),
        root_path,
    )
    return result


__all__ = ["discover", "iter_tree"]
