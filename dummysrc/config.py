"""Configuration loading for dummysrc (.dummysrc.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".dummysrc.yml"

ABORT = "abort"
SKIP = "skip"
_MANIFEST_ERROR_POLICIES = (ABORT, SKIP)


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class DummySrcConfig:
    """Represents the settings defined in .dummysrc.yml."""

    root: Path
    lock_file: str = "Cargo.lock"
    manifest_name: str = "Cargo.toml"
    config_dir: str = ".cargo"
    config_names: List[str] = field(default_factory=lambda: ["config.toml", "config"])
    exclude_dirs: List[str] = field(default_factory=lambda: [".git"])
    on_manifest_error: str = ABORT
    max_workers: Optional[int] = None


def load_config(config_path: Path) -> DummySrcConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return DummySrcConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    config = DummySrcConfig(root=root)

    lock_file = _as_str(data.get("lock_file"))
    if lock_file:
        config.lock_file = lock_file
    manifest_name = _as_str(data.get("manifest_name"))
    if manifest_name:
        config.manifest_name = manifest_name
    config_dir = _as_str(data.get("config_dir"))
    if config_dir:
        config.config_dir = config_dir
    if "config_names" in data:
        config.config_names = _as_str_list(data.get("config_names"))
    if "exclude_dirs" in data:
        config.exclude_dirs = _as_str_list(data.get("exclude_dirs"))

    policy = _as_str(data.get("on_manifest_error"))
    if policy is not None:
        policy = policy.strip().lower()
        if policy not in _MANIFEST_ERROR_POLICIES:
            allowed = ", ".join(_MANIFEST_ERROR_POLICIES)
            raise ConfigError(
                f"on_manifest_error must be one of {allowed}, got {policy!r}"
            )
        config.on_manifest_error = policy

    max_workers = _as_int(data.get("max_workers"))
    if max_workers is not None:
        if max_workers < 1:
            raise ConfigError("max_workers must be a positive integer")
        config.max_workers = max_workers

    return config


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["ABORT", "CONFIG_FILENAME", "ConfigError", "DummySrcConfig", "SKIP", "load_config"]
