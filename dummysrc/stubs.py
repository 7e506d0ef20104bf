"""Placeholder sources for every target a sanitized manifest declares."""

from __future__ import annotations

import posixpath
from typing import Dict, List

from .errors import ManifestFormatError
from .models import PackageManifest, SanitizedManifest, StubFile, WorkspaceManifest

STUB_SOURCE = "#![allow(dead_code)]\npub fn main() {}\n"


def synthesize(manifest: SanitizedManifest) -> List[StubFile]:
    """Return one stub per distinct target path, relative to the source root."""
    if isinstance(manifest, WorkspaceManifest):
        return []
    if not isinstance(manifest, PackageManifest):
        raise TypeError(f"Unsupported manifest variant: {type(manifest).__name__}")

    base = posixpath.dirname(manifest.path)
    stubs: Dict[str, StubFile] = {}
    for target in manifest.targets:
        rel_path = resolve_stub_path(base, target.path, manifest=manifest.path)
        stubs.setdefault(rel_path, StubFile(path=rel_path, body=STUB_SOURCE))
    return list(stubs.values())


def resolve_stub_path(base: str, target_path: str, *, manifest: str) -> str:
    """Join ``target_path`` onto the manifest directory and keep it inside the tree."""
    if posixpath.isabs(target_path):
        raise ManifestFormatError(manifest, f"target path {target_path!r} must be relative")
    if posixpath.normpath(target_path) == ".":
        raise ManifestFormatError(manifest, f"target path {target_path!r} does not name a file")
    joined = posixpath.normpath(posixpath.join(base, target_path))
    if joined == "." or joined == ".." or joined.startswith("../"):
        raise ManifestFormatError(manifest, f"target path {target_path!r} escapes the source tree")
    return joined


__all__ = ["STUB_SOURCE", "resolve_stub_path", "synthesize"]
