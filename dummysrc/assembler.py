"""Compose the dummy source tree from filtered files, manifests and stubs."""

from __future__ import annotations

import shutil
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

import tomli_w

from .config import ABORT, DummySrcConfig, load_config
from .discovery import discover
from .errors import ManifestFormatError, PathCollisionError, TraversalError
from .logging import get_logger
from .models import AssemblyReport, DiscoveryResult, FilteredTree, SanitizedManifest, StubFile
from .sanitizer import load_manifest, sanitize
from .source_filter import collect_interesting, copy_filtered, filter_tree, relative_within
from .stubs import synthesize


@dataclass
class PreparedManifest:
    """A sanitized manifest together with the stubs its targets need."""

    manifest: SanitizedManifest
    stubs: List[StubFile]


def prepare_manifest(root: Path, rel_path: str) -> PreparedManifest:
    """Load, sanitize and synthesize stubs for a single manifest."""
    manifest = sanitize(load_manifest(root, rel_path))
    return PreparedManifest(manifest=manifest, stubs=synthesize(manifest))


def merge_outputs(prepared: List[PreparedManifest]) -> Dict[str, str]:
    """Map every generated output path to its owner, rejecting duplicates."""
    owners: Dict[str, str] = {}

    def _claim(path: str, owner: str) -> None:
        existing = owners.get(path)
        if existing is not None:
            raise PathCollisionError(path, existing, owner)
        owners[path] = owner

    for item in prepared:
        _claim(item.manifest.path, f"manifest {item.manifest.path}")
    for item in prepared:
        for stub in item.stubs:
            _claim(stub.path, f"stub for {item.manifest.path}")
    return owners


class Assembler:
    """Builds a minimal dependency-only source tree for a Cargo project."""

    def __init__(self, config: DummySrcConfig | None = None) -> None:
        self.config = config
        self.logger = get_logger("assembler")

    def build(self, src: str | Path, out: str | Path, *, lock_file: str | Path | None = None) -> AssemblyReport:
        """Regenerate ``out`` as the dummy source tree for ``src``."""
        root = Path(src).expanduser().resolve()
        if not root.is_dir():
            raise TraversalError(root, "source tree not found or not a directory")
        out_path = Path(out).expanduser().resolve()
        if out_path == root or root.is_relative_to(out_path):
            raise ValueError(f"Output directory {out_path} would overwrite the source tree {root}")

        config = self.config or load_config(root)
        lock = Path(lock_file).expanduser() if lock_file is not None else root / config.lock_file
        self.logger.info("Building dummy source for %s into %s", root, out_path)

        discovery = discover(root, config, exclude=[out_path])
        filtered, prepared, skipped = self._process(root, discovery, lock, config)
        merge_outputs(prepared)
        self._check_output_spares_sources(root, out_path, filtered, lock)

        report = AssemblyReport(output=str(out_path), skipped_manifests=skipped)
        self._reset_output(out_path)
        report.copied = copy_filtered(root, filtered, out_path)
        report.lock_file = self._copy_lock(root, lock, out_path, config)

        for item in prepared:
            destination = out_path / item.manifest.path
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(tomli_w.dumps(item.manifest.document), encoding="utf-8")
            report.manifests.append(item.manifest.path)

        for item in prepared:
            for stub in item.stubs:
                destination = out_path / stub.path
                destination.parent.mkdir(parents=True, exist_ok=True)
                destination.write_text(stub.body, encoding="utf-8")
                report.stubs.append(stub.path)

        self.logger.info(
            "Wrote %d manifests, %d stubs and %d verbatim files",
            len(report.manifests),
            len(report.stubs),
            len(report.copied),
        )
        return report

    def _process(
        self,
        root: Path,
        discovery: DiscoveryResult,
        lock: Path,
        config: DummySrcConfig,
    ) -> Tuple[FilteredTree, List[PreparedManifest], List[str]]:
        prepared: List[PreparedManifest] = []
        skipped: List[str] = []

        with ThreadPoolExecutor(max_workers=config.max_workers, thread_name_prefix="dummysrc") as executor:
            future_filter = executor.submit(self._filter, root, discovery, lock)
            futures = [
                (rel_path, executor.submit(prepare_manifest, root, rel_path))
                for rel_path in discovery.manifests
            ]

            for rel_path, future in futures:
                try:
                    prepared.append(future.result())
                except ManifestFormatError as exc:
                    if config.on_manifest_error == ABORT:
                        raise
                    self.logger.warning("Skipping malformed manifest %s", exc)
                    skipped.append(rel_path)

            filtered = future_filter.result()

        return filtered, prepared, skipped

    @staticmethod
    def _filter(root: Path, discovery: DiscoveryResult, lock: Path) -> FilteredTree:
        interesting = collect_interesting(discovery, lock)
        return filter_tree(root, interesting)

    def _copy_lock(self, root: Path, lock: Path, out_path: Path, config: DummySrcConfig) -> str | None:
        if not lock.is_file():
            self.logger.debug("No lock file at %s; dependency versions are not pinned", lock)
            return None
        root_name = Path(config.lock_file).name
        rel_path = relative_within(root, lock) or root_name
        destination = out_path / rel_path
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(lock, destination)
        # Cargo only reads the lock file at the workspace root.
        if rel_path != root_name:
            shutil.copyfile(lock, out_path / root_name)
        return rel_path

    @staticmethod
    def _check_output_spares_sources(root: Path, out_path: Path, filtered: FilteredTree, lock: Path) -> None:
        kept = [root / rel_path for rel_path in filtered.files]
        if lock.is_file():
            kept.append(lock.resolve())
        for path in kept:
            if path.is_relative_to(out_path):
                raise ValueError(f"Output directory {out_path} contains source file {path}")

    @staticmethod
    def _reset_output(out_path: Path) -> None:
        if out_path.is_dir() and not out_path.is_symlink():
            shutil.rmtree(out_path)
        elif out_path.exists() or out_path.is_symlink():
            out_path.unlink()
        out_path.mkdir(parents=True)


def build_dummy_source(
    src: str | Path,
    out: str | Path,
    *,
    lock_file: str | Path | None = None,
    config: DummySrcConfig | None = None,
) -> AssemblyReport:
    """Regenerate ``out`` as the dummy source tree for ``src``."""
    return Assembler(config).build(src, out, lock_file=lock_file)


__all__ = ["Assembler", "PreparedManifest", "build_dummy_source", "merge_outputs", "prepare_manifest"]
