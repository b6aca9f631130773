"""Discovery of class-like declarations in PHP source trees."""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Iterator, List, Optional, Pattern, Union

from tree_sitter import Node, Parser

from ..logging import get_logger
from ..models import ClassMapEntry
from .base import PHP_SUFFIXES, create_parser, node_text

_DECLARATION_TYPES = {
    "class_declaration",
    "interface_declaration",
    "trait_declaration",
    "enum_declaration",
}

# Files without any of these words cannot declare a class; skip parsing them.
_DECLARATION_HINT = re.compile(rb"\b(?:class|interface|trait|enum)\s", re.IGNORECASE)


def find_classes(parser: Parser, source: bytes) -> List[str]:
    """Return the fully-qualified class-like names declared in ``source``."""
    if not _DECLARATION_HINT.search(source):
        return []
    tree = parser.parse(source)
    found: List[str] = []
    _collect_declarations(tree.root_node, "", found)
    return found


def _collect_declarations(node: Node, namespace: str, found: List[str]) -> None:
    for child in node.named_children:
        if child.type == "namespace_definition":
            name_node = child.child_by_field_name("name")
            declared = "".join(node_text(name_node).split()) if name_node is not None else ""
            body = child.child_by_field_name("body")
            if body is not None:
                _collect_declarations(body, declared, found)
            else:
                # `namespace Foo;` applies to every following statement.
                namespace = declared
            continue

        if child.type in _DECLARATION_TYPES:
            name_node = child.child_by_field_name("name")
            if name_node is None:
                continue
            name = node_text(name_node)
            found.append(f"{namespace}\\{name}" if namespace else name)
            continue

        _collect_declarations(child, namespace, found)


class ClassMapBuilder:
    """Walks PHP source roots and yields the classes they declare."""

    def __init__(self, parser: Parser | None = None) -> None:
        self._parser = parser or create_parser()
        self.logger = get_logger("scanners.classes")

    def scan(
        self,
        path: Union[str, Path],
        exclude: Union[str, Pattern[str], None] = None,
        namespace_filter: Optional[str] = None,
    ) -> Iterator[ClassMapEntry]:
        """Yield entries for ``path`` in traversal order.

        ``path`` may be a directory or a single file; a missing path yields
        nothing. Files whose forward-slash path matches ``exclude`` are
        skipped, and with ``namespace_filter`` only names starting with that
        prefix are produced.
        """
        root = Path(path)
        pattern = re.compile(exclude) if isinstance(exclude, str) else exclude

        for file_path in self._iter_source_files(root):
            posix_path = file_path.replace("\\", "/")
            if pattern is not None and pattern.search(posix_path):
                self.logger.debug("Excluded %s from classmap", posix_path)
                continue
            try:
                source = Path(file_path).read_bytes()
            except OSError as exc:
                self.logger.debug("Skipping unreadable %s: %s", posix_path, exc)
                continue

            for name in find_classes(self._parser, source):
                if namespace_filter is not None and not name.startswith(namespace_filter):
                    continue
                yield ClassMapEntry(name=name, path=posix_path)

    def _iter_source_files(self, root: Path) -> Iterator[str]:
        if root.is_file():
            yield str(root)
            return
        if not root.is_dir():
            self.logger.debug("Classmap source %s does not exist", root)
            return

        for dirpath, dirnames, filenames in os.walk(root, followlinks=True):
            dirnames.sort()
            for filename in sorted(filenames):
                if filename.endswith(PHP_SUFFIXES):
                    yield os.path.join(dirpath, filename)
