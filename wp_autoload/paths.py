"""Relocatable PHP path expressions between filesystem locations."""

from __future__ import annotations

import posixpath
import re
from dataclasses import dataclass, replace
from pathlib import PurePath
from typing import List, Optional, Tuple

STATIC_ANCHOR = "dirname(__FILE__)"
VENDOR_DIR_VARIABLE = "$vendorDir"
BASE_DIR_VARIABLE = "$baseDir"

_DRIVE_ROOT = re.compile(r"^([A-Za-z]):/")


def export_string(value: str) -> str:
    """Render ``value`` the way PHP's ``var_export`` renders a string."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def normalize_path(path: str | PurePath) -> str:
    """Return ``path`` with forward slashes and ``.``/``..`` segments collapsed."""
    text = str(path).replace("\\", "/")
    if not text:
        return ""
    drive = ""
    match = _DRIVE_ROOT.match(text)
    if match:
        drive = match.group(1).lower() + ":"
        text = text[2:]
    normalised = posixpath.normpath(text)
    if normalised.startswith("//"):
        normalised = "/" + normalised.lstrip("/")
    if normalised == "." and not drive:
        return ""
    return drive + normalised


def is_absolute_path(path: str | PurePath) -> bool:
    text = str(path).replace("\\", "/")
    return text.startswith("/") or bool(_DRIVE_ROOT.match(text))


def _split(path: str) -> Tuple[str, List[str]]:
    """Split a normalised absolute path into its root and segments."""
    if path.startswith("/"):
        root, rest = "/", path[1:]
    else:
        root, rest = path[:3], path[3:]
    return root, [part for part in rest.split("/") if part]


@dataclass(frozen=True)
class PathExpression:
    """PHP code locating a path relative to a runtime anchor.

    ``levels`` counts the ``dirname()`` calls applied to ``anchor`` before
    ``tail`` is appended. ``literal`` is only set when no common root exists.
    """

    anchor: str
    levels: int = 0
    tail: str = ""
    literal: Optional[str] = None

    def render(self) -> str:
        if self.literal is not None:
            return export_string(self.literal)
        code = "dirname(" * self.levels + self.anchor + ")" * self.levels
        if self.tail:
            code = f"{code} . {export_string(self.tail)}"
        return code

    def replace_parent(self, parent_code: str) -> "PathExpression":
        """Substitute the first ``dirname(anchor)`` step with ``parent_code``."""
        if self.literal is not None or self.levels < 1:
            return self
        return replace(self, anchor=parent_code, levels=self.levels - 1)

    def evaluate(self, anchor_path: str) -> str:
        """Resolve the expression given the directory the anchor stands for."""
        if self.literal is not None:
            return self.literal
        current = normalize_path(anchor_path)
        for _ in range(self.levels):
            current = posixpath.dirname(current) if current not in ("/", "") else current
        return normalize_path(current + self.tail)

    def __str__(self) -> str:
        return self.render()


class PathResolver:
    """Computes shortest relative paths and the PHP code that rebuilds them."""

    def __init__(self, base_path: str | PurePath, vendor_path: str | PurePath) -> None:
        self.base_path = normalize_path(base_path)
        self.vendor_path = normalize_path(vendor_path)

    def resolve(
        self,
        from_dir: str | PurePath,
        to_path: str | PurePath,
        static: bool = True,
        variable: str = VENDOR_DIR_VARIABLE,
    ) -> PathExpression:
        """Return the expression reaching ``to_path`` from the directory ``from_dir``.

        A static expression is anchored on the executing file's directory and
        is only valid inside a file living in ``from_dir``. A dynamic one is
        anchored on ``variable`` which must hold ``from_dir`` at runtime.
        """
        if not is_absolute_path(from_dir) or not is_absolute_path(to_path):
            raise ValueError(f"Expected absolute paths, got {from_dir!r} and {to_path!r}")

        anchor = STATIC_ANCHOR if static else variable
        source = normalize_path(from_dir)
        target = normalize_path(to_path)
        if source == target:
            return PathExpression(anchor)

        levels, tail = self._relative_parts(source, target)
        if levels is None:
            return PathExpression(anchor, literal=target)
        return PathExpression(anchor, levels, "/" + "/".join(tail) if tail else "")

    def file_code(self, path: str | PurePath) -> str:
        """Render a reference to ``path`` rooted on ``$vendorDir`` or ``$baseDir``."""
        text = str(path)
        if not is_absolute_path(text):
            text = f"{self.base_path}/{text}"
        target = normalize_path(text)

        if f"{target}/".startswith(f"{self.vendor_path}/"):
            prefix = f"{VENDOR_DIR_VARIABLE} . "
            relative = target[len(self.vendor_path):]
        else:
            levels, tail = self._relative_parts(self.base_path, target)
            if levels is None:
                prefix = ""
                relative = target
            else:
                prefix = f"{BASE_DIR_VARIABLE} . "
                relative = "/" + "/".join([".."] * levels + tail)

        if ".phar" in relative:
            prefix = "'phar://' . " + prefix
        return prefix + export_string(relative)

    @staticmethod
    def _relative_parts(source: str, target: str) -> Tuple[Optional[int], List[str]]:
        source_root, source_parts = _split(source)
        target_root, target_parts = _split(target)
        if source_root != target_root:
            return None, []

        common = 0
        for left, right in zip(source_parts, target_parts):
            if left != right:
                break
            common += 1
        return len(source_parts) - common, target_parts[common:]


__all__ = [
    "BASE_DIR_VARIABLE",
    "PathExpression",
    "PathResolver",
    "STATIC_ANCHOR",
    "VENDOR_DIR_VARIABLE",
    "export_string",
    "is_absolute_path",
    "normalize_path",
]
