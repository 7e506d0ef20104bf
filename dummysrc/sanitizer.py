"""Reduce Cargo manifests to the fields that affect dependency builds.

Only package identity, dependency tables, target declarations and workspace
membership survive. Everything else (descriptions, authors, badges, metadata
tables, comments) is dropped so that editing it never changes the sanitized
output. Mapping keys are emitted in sorted order, which makes the result
insensitive to reordering in the source file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Dict, List, Mapping

from .errors import ManifestFormatError
from .models import (
    ManifestFile,
    PackageManifest,
    SanitizedManifest,
    Target,
    TargetKind,
    WorkspaceManifest,
)

_PACKAGE_KEYS = (
    "name",
    "version",
    "edition",
    "rust-version",
    "links",
    "build",
    "resolver",
    "workspace",
    "autolib",
    "autobins",
    "autoexamples",
    "autotests",
    "autobenches",
)

_DEPENDENCY_TABLES = (
    "dependencies",
    "dev-dependencies",
    "dev_dependencies",
    "build-dependencies",
    "build_dependencies",
)

# Tables that steer resolution or dependency compilation as a whole.
_VERBATIM_TABLES = ("features", "patch", "replace", "profile")

_TARGET_KEYS = (
    "name",
    "path",
    "crate-type",
    "crate_type",
    "proc-macro",
    "proc_macro",
    "edition",
    "required-features",
    "harness",
)

_TARGET_LISTS = (
    TargetKind.BINARY,
    TargetKind.EXAMPLE,
    TargetKind.TEST,
    TargetKind.BENCHMARK,
)

_DEFAULT_TARGET_DIRS = {
    TargetKind.BINARY: "src/bin",
    TargetKind.EXAMPLE: "examples",
    TargetKind.TEST: "tests",
    TargetKind.BENCHMARK: "benches",
}

_WORKSPACE_KEYS = ("members", "exclude", "default-members", "resolver")
_WORKSPACE_PACKAGE_KEYS = ("version", "edition", "rust-version")

DEFAULT_LIB_PATH = "src/lib.rs"
DEFAULT_BUILD_SCRIPT = "build.rs"


def load_manifest(root: Path, rel_path: str) -> ManifestFile:
    """Read and parse the manifest at ``root / rel_path``."""
    raw = (Path(root) / rel_path).read_bytes()
    try:
        document = tomllib.loads(raw.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise ManifestFormatError(rel_path, f"not valid UTF-8: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ManifestFormatError(rel_path, f"invalid TOML: {exc}") from exc
    return ManifestFile(path=rel_path, document=document)


def sanitize(manifest: ManifestFile) -> SanitizedManifest:
    """Return the cache-stable variant of ``manifest``."""
    document = sanitize_document(manifest.document, path=manifest.path)
    if "package" in document:
        return PackageManifest(
            path=manifest.path,
            document=document,
            targets=resolve_targets(document),
        )
    return WorkspaceManifest(path=manifest.path, document=document)


def sanitize_document(document: Mapping[str, Any], *, path: str) -> Dict[str, Any]:
    """Return a new manifest mapping holding only the retained fields."""
    if not isinstance(document, Mapping):
        raise ManifestFormatError(path, "manifest root must be a table")

    cleaned: Dict[str, Any] = {}

    if "package" in document:
        cleaned["package"] = _clean_package(document["package"], path)

    for table in _DEPENDENCY_TABLES:
        if table in document:
            cleaned[table] = _clean_dependencies(document[table], path, table)

    if "target" in document:
        platforms = _clean_platform_dependencies(document["target"], path)
        if platforms:
            cleaned["target"] = platforms

    for table in _VERBATIM_TABLES:
        if table in document:
            cleaned[table] = _sorted_copy(document[table])

    if "lib" in document:
        cleaned["lib"] = _clean_target(document["lib"], TargetKind.LIBRARY, path)

    for kind in _TARGET_LISTS:
        if kind.value not in document:
            continue
        entries = document[kind.value]
        if not isinstance(entries, list):
            raise ManifestFormatError(path, f"[[{kind.value}]] must be an array of tables")
        cleaned[kind.value] = [_clean_target(entry, kind, path) for entry in entries]

    if "workspace" in document:
        cleaned["workspace"] = _clean_workspace(document["workspace"], path)

    return cleaned


def resolve_targets(document: Mapping[str, Any]) -> tuple[Target, ...]:
    """Return every target a sanitized package document builds, implicit ones included."""
    package = document["package"]
    lib = document.get("lib")
    targets: List[Target] = [
        Target(
            kind=TargetKind.LIBRARY,
            name=(lib or {}).get("name", package["name"]),
            path=lib["path"] if lib else DEFAULT_LIB_PATH,
        )
    ]

    build = package.get("build")
    targets.append(
        Target(
            kind=TargetKind.BUILD_SCRIPT,
            name=None,
            path=build if isinstance(build, str) else DEFAULT_BUILD_SCRIPT,
        )
    )

    for kind in _TARGET_LISTS:
        for entry in document.get(kind.value, []):
            targets.append(Target(kind=kind, name=entry.get("name"), path=entry["path"]))
    return tuple(targets)


def _clean_package(package: Any, path: str) -> Dict[str, Any]:
    if not isinstance(package, Mapping):
        raise ManifestFormatError(path, "[package] must be a table")
    name = package.get("name")
    if not isinstance(name, str) or not name:
        raise ManifestFormatError(path, "package.name must be a non-empty string")
    return {key: _sorted_copy(package[key]) for key in _PACKAGE_KEYS if key in package}


def _clean_dependencies(table: Any, path: str, label: str) -> Dict[str, Any]:
    if not isinstance(table, Mapping):
        raise ManifestFormatError(path, f"[{label}] must be a table")
    cleaned: Dict[str, Any] = {}
    for name in sorted(table):
        spec = table[name]
        if isinstance(spec, str):
            cleaned[name] = {"version": spec}
        elif isinstance(spec, Mapping):
            cleaned[name] = _sorted_copy(spec)
        else:
            raise ManifestFormatError(
                path, f"dependency {label}.{name} must be a version string or a table"
            )
    return cleaned


def _clean_platform_dependencies(targets: Any, path: str) -> Dict[str, Any]:
    if not isinstance(targets, Mapping):
        raise ManifestFormatError(path, "[target] must be a table")
    cleaned: Dict[str, Any] = {}
    for platform in sorted(targets):
        section = targets[platform]
        if not isinstance(section, Mapping):
            raise ManifestFormatError(path, f"[target.{platform}] must be a table")
        kept = {
            table: _clean_dependencies(section[table], path, f"target.{platform}.{table}")
            for table in _DEPENDENCY_TABLES
            if table in section
        }
        if kept:
            cleaned[platform] = kept
    return cleaned


def _clean_target(raw: Any, kind: TargetKind, path: str) -> Dict[str, Any]:
    if not isinstance(raw, Mapping):
        raise ManifestFormatError(path, f"{kind.value} target must be a table")

    cleaned = {key: _sorted_copy(raw[key]) for key in _TARGET_KEYS if key in raw}
    name = cleaned.get("name")
    if name is not None and not isinstance(name, str):
        raise ManifestFormatError(path, f"{kind.value}.name must be a string")

    target_path = cleaned.get("path")
    if target_path is None:
        if kind is TargetKind.LIBRARY:
            target_path = DEFAULT_LIB_PATH
        elif name is None:
            raise ManifestFormatError(path, f"{kind.value} target needs a name or a path")
        else:
            target_path = f"{_DEFAULT_TARGET_DIRS[kind]}/{name}.rs"
    elif not isinstance(target_path, str):
        raise ManifestFormatError(path, f"{kind.value}.path must be a string")

    cleaned["path"] = target_path
    return dict(sorted(cleaned.items()))


def _clean_workspace(workspace: Any, path: str) -> Dict[str, Any]:
    if not isinstance(workspace, Mapping):
        raise ManifestFormatError(path, "[workspace] must be a table")
    cleaned = {key: _sorted_copy(workspace[key]) for key in _WORKSPACE_KEYS if key in workspace}
    if "dependencies" in workspace:
        cleaned["dependencies"] = _clean_dependencies(
            workspace["dependencies"], path, "workspace.dependencies"
        )
    shared = workspace.get("package")
    if isinstance(shared, Mapping):
        kept = {key: _sorted_copy(shared[key]) for key in _WORKSPACE_PACKAGE_KEYS if key in shared}
        if kept:
            cleaned["package"] = kept
    return dict(sorted(cleaned.items()))


def _sorted_copy(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {key: _sorted_copy(value[key]) for key in sorted(value)}
    if isinstance(value, list):
        return [_sorted_copy(item) for item in value]
    return value


__all__ = [
    "DEFAULT_BUILD_SCRIPT",
    "DEFAULT_LIB_PATH",
    "load_manifest",
    "resolve_targets",
    "sanitize",
    "sanitize_document",
]
