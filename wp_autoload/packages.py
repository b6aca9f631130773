"""Host-side adapters turning Composer metadata into autoload declarations."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Protocol, Sequence, Tuple

from .config import COMPOSER_FILENAME, ConfigError
from .logging import get_logger
from .models import PackageAutoloadDeclaration
from .paths import normalize_path

logger = get_logger("packages")


class PackageSource(Protocol):
    """Supplies the resolved main package and its installed dependencies."""

    def load(self) -> Tuple[PackageAutoloadDeclaration, List[PackageAutoloadDeclaration]]:
        ...


class StaticPackageSource:
    """Package source over declarations that were resolved elsewhere."""

    def __init__(
        self,
        main: PackageAutoloadDeclaration,
        packages: Sequence[PackageAutoloadDeclaration] = (),
    ) -> None:
        self._main = main
        self._packages = list(packages)

    def load(self) -> Tuple[PackageAutoloadDeclaration, List[PackageAutoloadDeclaration]]:
        return self._main, list(self._packages)


class ComposerPackageSource:
    """Reads ``composer.json`` and ``<vendor>/composer/installed.json``."""

    def __init__(self, base_path: Path, vendor_dir: Path) -> None:
        self.base_path = Path(base_path)
        self.vendor_dir = Path(vendor_dir)

    def load(self) -> Tuple[PackageAutoloadDeclaration, List[PackageAutoloadDeclaration]]:
        main_data = self._read_json(self.base_path / COMPOSER_FILENAME)
        if not isinstance(main_data, dict):
            main_data = {}
        main = declaration_from_composer(main_data, str(self.base_path), is_main=True)

        installed = self._read_json(self.vendor_dir / "composer" / "installed.json")
        if isinstance(installed, dict):
            entries = installed.get("packages", [])
        else:
            entries = installed or []

        packages: List[PackageAutoloadDeclaration] = []
        for entry in entries if isinstance(entries, list) else []:
            if not isinstance(entry, dict) or not isinstance(entry.get("name"), str):
                logger.debug("Skipping malformed installed.json entry: %r", entry)
                continue
            packages.append(
                declaration_from_composer(entry, str(self._install_path(entry)), is_main=False)
            )
        logger.debug("Loaded %d installed packages", len(packages))
        return main, packages

    def _install_path(self, entry: Mapping[str, Any]) -> Path:
        install_path = entry.get("install-path")
        if isinstance(install_path, str) and install_path:
            return Path(normalize_path(self.vendor_dir / "composer" / install_path))
        path = self.vendor_dir / entry["name"]
        target_dir = entry.get("target-dir")
        if isinstance(target_dir, str) and target_dir:
            path = path / target_dir
        return path

    @staticmethod
    def _read_json(path: Path) -> Any:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def declaration_from_composer(
    data: Mapping[str, Any], install_path: str, *, is_main: bool = False
) -> PackageAutoloadDeclaration:
    """Build a declaration from one composer.json-shaped package entry."""
    autoload = data.get("autoload")
    if not isinstance(autoload, dict):
        autoload = {}
    target_dir = data.get("target-dir") if isinstance(data.get("target-dir"), str) else None

    exclude_root = normalize_path(install_path)
    if not is_main and target_dir and exclude_root.endswith("/" + target_dir.strip("/")):
        exclude_root = exclude_root[: -len(target_dir.strip("/")) - 1]

    return PackageAutoloadDeclaration(
        name=str(data.get("name") or "__root__"),
        install_path=install_path,
        target_dir=target_dir,
        psr0=_namespace_map(autoload.get("psr-0")),
        psr4=_namespace_map(autoload.get("psr-4")),
        classmap=_string_tuple(autoload.get("classmap")),
        files=_string_tuple(autoload.get("files")),
        exclude_from_classmap=tuple(
            exclude_pattern(exclude_root, path)
            for path in _string_tuple(autoload.get("exclude-from-classmap"))
        ),
        include_paths=_string_tuple(data.get("include-path")),
    )


def exclude_pattern(install_root: str, path: str) -> str:
    """Translate a Composer exclude path (``*`` and ``**`` globs) to a regex."""
    cleaned = path.replace("\\", "/")
    while cleaned.startswith("./"):
        cleaned = cleaned[2:]
    cleaned = cleaned.strip("/")
    pattern = re.escape(cleaned)
    pattern = pattern.replace(r"\*\*", ".+?").replace(r"\*", "[^/]+?")
    return re.escape(normalize_path(install_root)) + "/" + pattern + "($|/)"


def _namespace_map(value: Any) -> Dict[str, Tuple[str, ...]]:
    if not isinstance(value, dict):
        return {}
    result: Dict[str, Tuple[str, ...]] = {}
    for namespace, paths in value.items():
        entries = _string_tuple(paths)
        if isinstance(namespace, str) and entries:
            result[namespace] = entries
    return result


def _string_tuple(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list):
        return tuple(item for item in value if isinstance(item, str))
    return ()


__all__ = [
    "ComposerPackageSource",
    "PackageSource",
    "StaticPackageSource",
    "declaration_from_composer",
    "exclude_pattern",
]
