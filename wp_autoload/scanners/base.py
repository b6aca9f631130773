"""Tree-sitter helpers shared by the PHP source scanners."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Iterator

import tree_sitter_php
from tree_sitter import Language, Node, Parser, Tree

PHP_SUFFIXES = (".php", ".inc", ".hh")


@lru_cache(maxsize=1)
def _php_language() -> Language:
    return Language(tree_sitter_php.language_php())


def create_parser() -> Parser:
    """Return a parser for PHP files that may mix inline HTML and code."""
    return Parser(_php_language())


def parse_file(parser: Parser, path: Path) -> Tree:
    """Parse ``path``; raises ``OSError`` when the file cannot be read."""
    return parser.parse(path.read_bytes())


def node_text(node: Node) -> str:
    text = node.text
    if text is None:
        return ""
    return text.decode("utf-8", errors="replace")


def iter_leaves(node: Node) -> Iterator[Node]:
    """Yield every token node below ``node`` in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.child_count == 0:
            yield current
            continue
        stack.extend(reversed(current.children))


__all__ = ["PHP_SUFFIXES", "create_parser", "iter_leaves", "node_text", "parse_file"]
