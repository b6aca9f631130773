"""Screening of PHP files for syntax newer than PHP 5.2."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from tree_sitter import Parser

from ..logging import get_logger
from .base import create_parser, iter_leaves, node_text, parse_file

# Keyword and punctuation tokens introduced by PHP 5.3 (namespaces, goto),
# 5.4 (traits) and 5.5 (finally, generators).
DEFAULT_FORBIDDEN_TOKENS = frozenset(
    {"namespace", "use", "goto", "\\", "trait", "finally", "yield"}
)
DEFAULT_FORBIDDEN_CONSTANTS = frozenset({"__dir__", "__namespace__", "__trait__"})


class LegacySyntaxDetector:
    """Best-effort lexical check for constructs an old runtime cannot parse.

    Only tokens are inspected; constructs missing from the forbidden sets go
    unnoticed. The result decides whether a bootstrap ``require`` is emitted.
    """

    def __init__(
        self,
        forbidden_tokens: Optional[Iterable[str]] = None,
        forbidden_constants: Optional[Iterable[str]] = None,
        parser: Parser | None = None,
    ) -> None:
        self.forbidden_tokens = frozenset(
            token.lower()
            for token in (DEFAULT_FORBIDDEN_TOKENS if forbidden_tokens is None else forbidden_tokens)
        )
        self.forbidden_constants = frozenset(
            constant.lower()
            for constant in (
                DEFAULT_FORBIDDEN_CONSTANTS if forbidden_constants is None else forbidden_constants
            )
        )
        self._parser = parser or create_parser()
        self.logger = get_logger("scanners.legacy")

    def uses_unsupported_syntax(self, path: str | Path) -> bool:
        """Return True at the first forbidden token found in ``path``."""
        file_path = Path(path)
        try:
            tree = parse_file(self._parser, file_path)
        except OSError as exc:
            self.logger.debug("Cannot read %s (%s); treating as unsupported", file_path, exc)
            return True

        for leaf in iter_leaves(tree.root_node):
            # Keywords and separators are anonymous tokens; string bodies and
            # comments are named nodes and never match here.
            if not leaf.is_named:
                token = leaf.type.lower()
                if token in self.forbidden_tokens or token in self.forbidden_constants:
                    self.logger.debug("%s uses '%s'", file_path, leaf.type)
                    return True
                continue
            if leaf.type == "name" and node_text(leaf).lower() in self.forbidden_constants:
                self.logger.debug("%s uses %s", file_path, node_text(leaf))
                return True
        return False
