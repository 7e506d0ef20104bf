"""Core data models shared across dummysrc components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Tuple, Union


class TargetKind(str, Enum):
    """Build target kinds, valued by their manifest section name."""

    LIBRARY = "lib"
    BINARY = "bin"
    EXAMPLE = "example"
    TEST = "test"
    BENCHMARK = "bench"
    BUILD_SCRIPT = "build"


@dataclass(frozen=True)
class Target:
    """A build target with its path resolved relative to the manifest directory."""

    kind: TargetKind
    name: str | None
    path: str


@dataclass
class ManifestFile:
    """A discovered manifest and its parsed content."""

    path: str
    document: Dict[str, Any]


@dataclass
class PackageManifest:
    """Sanitized manifest that declares a package of its own."""

    path: str
    document: Dict[str, Any]
    targets: Tuple[Target, ...] = ()

    @property
    def name(self) -> str:
        return self.document["package"]["name"]


@dataclass
class WorkspaceManifest:
    """Sanitized manifest that only aggregates workspace members."""

    path: str
    document: Dict[str, Any]

    @property
    def members(self) -> List[str]:
        workspace = self.document.get("workspace", {})
        return list(workspace.get("members", []))


SanitizedManifest = Union[PackageManifest, WorkspaceManifest]


@dataclass
class DiscoveryResult:
    """Manifest and config files found beneath a source root."""

    root: str
    manifests: List[str] = field(default_factory=list)
    configs: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class StubFile:
    """Placeholder source to be written at a path relative to the source root."""

    path: str
    body: str


@dataclass(frozen=True)
class FilteredTree:
    """Directories and files that survive the source filter."""

    directories: frozenset[str]
    files: frozenset[str]


@dataclass
class AssemblyReport:
    """Summary of what was written to the dummy source tree."""

    output: str
    lock_file: str | None = None
    copied: List[str] = field(default_factory=list)
    manifests: List[str] = field(default_factory=list)
    stubs: List[str] = field(default_factory=list)
    skipped_manifests: List[str] = field(default_factory=list)
