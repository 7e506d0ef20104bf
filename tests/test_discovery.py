"""Tests for dummysrc.discovery."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from dummysrc import discovery
from dummysrc.config import DummySrcConfig
from dummysrc.discovery import discover
from dummysrc.errors import TraversalError


def _write(path: Path, content: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_discover_finds_nested_manifests_and_configs(tmp_path: Path) -> None:
    _write(tmp_path / "Cargo.toml", "[workspace]\n")
    _write(tmp_path / "crates" / "a" / "Cargo.toml")
    _write(tmp_path / "crates" / "deep" / "er" / "still" / "b" / "Cargo.toml")
    _write(tmp_path / ".cargo" / "config.toml")
    _write(tmp_path / "crates" / "a" / ".cargo" / "config")
    _write(tmp_path / "config.toml")
    _write(tmp_path / "crates" / "a" / "src" / "main.rs")
    _write(tmp_path / ".git" / "Cargo.toml")

    result = discover(tmp_path)

    assert result.root == str(tmp_path.resolve())
    assert sorted(result.manifests) == [
        "Cargo.toml",
        "crates/a/Cargo.toml",
        "crates/deep/er/still/b/Cargo.toml",
    ]
    assert sorted(result.configs) == [".cargo/config.toml", "crates/a/.cargo/config"]
    assert result.skipped == []


def test_discover_honours_configured_names(tmp_path: Path) -> None:
    _write(tmp_path / "vendor" / "x" / "Cargo.toml")
    _write(tmp_path / "keep" / "Cargo.toml")
    _write(tmp_path / ".cargo" / "config")

    config = DummySrcConfig(root=tmp_path, exclude_dirs=["vendor"], config_names=["config.toml"])
    result = discover(tmp_path, config)

    assert result.manifests == ["keep/Cargo.toml"]
    assert result.configs == []


def test_discover_skips_excluded_output_directory(tmp_path: Path) -> None:
    _write(tmp_path / "Cargo.toml")
    _write(tmp_path / "target" / "dummy" / "Cargo.toml")

    result = discover(tmp_path, exclude=[tmp_path / "target" / "dummy"])

    assert result.manifests == ["Cargo.toml"]


def test_discover_reports_unreadable_files(tmp_path: Path, monkeypatch) -> None:
    _write(tmp_path / "Cargo.toml")
    _write(tmp_path / "locked" / "Cargo.toml")

    monkeypatch.setattr(discovery, "_is_readable", lambda path: path.parent.name != "locked")

    result = discover(tmp_path)

    assert result.manifests == ["Cargo.toml"]
    assert result.skipped == ["locked/Cargo.toml"]


def test_discover_rejects_missing_root(tmp_path: Path) -> None:
    missing = tmp_path / "missing"

    with pytest.raises(TraversalError) as excinfo:
        discover(missing)

    assert str(missing) in str(excinfo.value)


def test_discover_rejects_file_root(tmp_path: Path) -> None:
    target = tmp_path / "Cargo.toml"
    _write(target)

    with pytest.raises(TraversalError):
        discover(target)


def test_discover_raises_on_unreadable_directory(tmp_path: Path, monkeypatch) -> None:
    secret = tmp_path / "secret"

    def _failing_walk(top, onerror=None, **kwargs):
        onerror(PermissionError(13, "Permission denied", str(secret)))
        return iter(())

    monkeypatch.setattr(os, "walk", _failing_walk)

    with pytest.raises(TraversalError) as excinfo:
        discover(tmp_path)

    assert excinfo.value.path == str(secret)
