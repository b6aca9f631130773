"""Flattening of package autoload declarations into absolute scan inputs."""

from __future__ import annotations

import os
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from .logging import get_logger
from .models import AutoloadSet, PackageAutoloadDeclaration
from .paths import is_absolute_path, normalize_path

logger = get_logger("autoloads")


def collect_autoloads(
    main: PackageAutoloadDeclaration,
    packages: Sequence[PackageAutoloadDeclaration],
    base_path: str,
) -> AutoloadSet:
    """Merge the declarations of ``main`` and ``packages``.

    Namespace rules list the main package first so its directories are
    searched before those of dependencies; classmap and files entries list it
    last so dependencies are loaded before the project code relying on them.
    """
    base = normalize_path(base_path)
    autoloads = AutoloadSet()

    namespaced = [(main, True)] + [(package, False) for package in packages]
    ordered = [(package, False) for package in packages] + [(main, True)]

    for package, is_main in namespaced:
        root = _install_root(package, base, is_main)
        _merge_namespaces(autoloads.psr0, package, "psr0", root, is_main)
        _merge_namespaces(autoloads.psr4, package, "psr4", root, is_main)

        for include_path in _as_paths(package.include_paths):
            autoloads.include_paths.append(_join(root, include_path.strip("/")))

    for package, is_main in ordered:
        root = _install_root(package, base, is_main)
        for path in _as_paths(package.classmap):
            autoloads.classmap.append(_join(root, path))
        for path in _as_paths(package.files):
            resolved = _join(root, path)
            if resolved not in autoloads.files:
                autoloads.files.append(resolved)
        autoloads.exclude_from_classmap.extend(_as_paths(package.exclude_from_classmap))

    logger.debug(
        "Collected %d PSR-0 and %d PSR-4 prefixes, %d classmap roots, %d files",
        len(autoloads.psr0),
        len(autoloads.psr4),
        len(autoloads.classmap),
        len(autoloads.files),
    )
    return autoloads


def namespace_scan_order(autoloads: AutoloadSet) -> List[Tuple[str, List[str]]]:
    """Return ``(namespace, paths)`` groups with the deepest prefixes first.

    Prefixes are visited in reverse lexicographic order so that a nested
    namespace claims its classes before its parent namespace is scanned.
    For one prefix, PSR-0 paths come before PSR-4 paths.
    """
    groups: Dict[str, List[List[str]]] = {}
    for mapping in (autoloads.psr0, autoloads.psr4):
        for namespace, paths in mapping.items():
            groups.setdefault(namespace, []).append(list(paths))

    order: List[Tuple[str, List[str]]] = []
    for namespace in sorted(groups, reverse=True):
        for paths in groups[namespace]:
            order.append((namespace, paths))
    return order


def _merge_namespaces(
    target: Dict[str, List[str]],
    package: PackageAutoloadDeclaration,
    kind: str,
    root: str,
    is_main: bool,
) -> None:
    mapping = getattr(package, kind, None)
    if not isinstance(mapping, Mapping):
        return

    target_dir = (package.target_dir or "").strip("/")
    for namespace, paths in mapping.items():
        if not isinstance(namespace, str):
            continue
        for path in _as_paths(paths):
            if kind == "psr0" and target_dir and not os.path.exists(_join(root, path)):
                if is_main:
                    path = _strip_prefix(path.strip("\\/"), target_dir)
                else:
                    path = f"{target_dir}/{path}"
            target.setdefault(namespace, []).append(_join(root, path))


def _install_root(package: PackageAutoloadDeclaration, base: str, is_main: bool) -> str:
    if is_main or not package.install_path:
        return base
    root = _join(base, package.install_path)
    target_dir = normalize_path(package.target_dir or "").strip("/")
    if target_dir and root.endswith("/" + target_dir):
        root = root[: -len(target_dir) - 1]
    return root


def _strip_prefix(path: str, prefix: str) -> str:
    normalised = path.replace("\\", "/")
    if normalised == prefix:
        return ""
    if normalised.startswith(prefix + "/"):
        return normalised[len(prefix) + 1 :]
    return path


def _join(root: str, path: str) -> str:
    if is_absolute_path(path):
        return normalize_path(path)
    if not path:
        return root
    return normalize_path(f"{root}/{path}")


def _as_paths(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Iterable) and not isinstance(value, Mapping):
        return [item for item in value if isinstance(item, str)]
    return []


__all__ = ["collect_autoloads", "namespace_scan_order"]
