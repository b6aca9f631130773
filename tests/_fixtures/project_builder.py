"""Helper utilities for constructing temporary Composer projects in tests."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Mapping, Sequence

from wp_autoload.config import GeneratorConfig
from wp_autoload.models import PackageAutoloadDeclaration


class ProjectBuilder:
    """Writes project files and package declarations into a scratch directory."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path.resolve() / "project"
        self.root.mkdir()
        self.vendor = self.root / "vendor"

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries relative to the project root."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def write_json(self, relative: str, payload: Any) -> None:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=4), encoding="utf-8")

    def package(self, name: str, **autoload: Any) -> PackageAutoloadDeclaration:
        """Return a declaration for a dependency installed under vendor/<name>."""
        return PackageAutoloadDeclaration(
            name=name, install_path=str(self.vendor / name), **_freeze(autoload)
        )

    def main_package(self, **autoload: Any) -> PackageAutoloadDeclaration:
        return PackageAutoloadDeclaration(
            name="acme/site", install_path=str(self.root), **_freeze(autoload)
        )

    def config(self, **overrides: Any) -> GeneratorConfig:
        return GeneratorConfig.for_project(self.root, "vendor", **overrides)

    def path(self) -> Path:
        """Return the project root path."""
        return self.root


def _freeze(values: Mapping[str, Any]) -> dict[str, Any]:
    frozen: dict[str, Any] = {}
    for key, value in values.items():
        if key in {"psr0", "psr4"}:
            frozen[key] = {namespace: _as_tuple(paths) for namespace, paths in value.items()}
        elif key in {"classmap", "files", "exclude_from_classmap", "include_paths"}:
            frozen[key] = _as_tuple(value)
        else:
            frozen[key] = value
    return frozen


def _as_tuple(value: str | Sequence[str]) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    return tuple(value)


__all__ = ["ProjectBuilder"]
