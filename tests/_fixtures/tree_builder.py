"""Helper utilities for constructing temporary Cargo trees in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Dict, Mapping

from dummysrc.assembler import build_dummy_source
from dummysrc.models import AssemblyReport


class TreeBuilder:
    """Utility for writing files into a throwaway source tree and building its dummy output."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()
        self.out = tmp_path / "dummy"

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the source tree."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def mkdir(self, relative: str) -> Path:
        """Create an (empty) directory inside the source tree."""
        path = self.root / relative
        path.mkdir(parents=True, exist_ok=True)
        return path

    def build(self, **kwargs) -> AssemblyReport:
        """Regenerate the dummy output for the current tree."""
        return build_dummy_source(self.root, self.out, **kwargs)

    def output_files(self) -> Dict[str, bytes]:
        """Return `relative path -> bytes` for every file in the output."""
        return {
            path.relative_to(self.out).as_posix(): path.read_bytes()
            for path in sorted(self.out.rglob("*"))
            if path.is_file()
        }

    def output_dirs(self) -> set[str]:
        """Return the relative paths of every directory in the output."""
        return {
            path.relative_to(self.out).as_posix()
            for path in self.out.rglob("*")
            if path.is_dir()
        }


__all__ = ["TreeBuilder"]
