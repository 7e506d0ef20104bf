"""Synthesize minimal dependency-only source trees for Cargo projects."""

from .assembler import Assembler, build_dummy_source
from .config import ConfigError, DummySrcConfig, load_config
from .discovery import discover
from .errors import DummySrcError, ManifestFormatError, PathCollisionError, TraversalError
from .models import (
    AssemblyReport,
    ManifestFile,
    PackageManifest,
    SanitizedManifest,
    Target,
    TargetKind,
    WorkspaceManifest,
)
from .sanitizer import load_manifest, sanitize
from .source_filter import collect_interesting, filter_tree
from .stubs import STUB_SOURCE, synthesize

__all__ = [
    "Assembler",
    "AssemblyReport",
    "ConfigError",
    "DummySrcConfig",
    "DummySrcError",
    "ManifestFile",
    "ManifestFormatError",
    "PackageManifest",
    "PathCollisionError",
    "STUB_SOURCE",
    "SanitizedManifest",
    "Target",
    "TargetKind",
    "TraversalError",
    "WorkspaceManifest",
    "build_dummy_source",
    "collect_interesting",
    "discover",
    "filter_tree",
    "load_config",
    "load_manifest",
    "sanitize",
    "synthesize",
]
