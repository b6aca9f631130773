"""PHP source scanners built on tree-sitter."""

from __future__ import annotations

from .classes import ClassMapBuilder, find_classes
from .legacy import DEFAULT_FORBIDDEN_CONSTANTS, DEFAULT_FORBIDDEN_TOKENS, LegacySyntaxDetector

__all__ = [
    "ClassMapBuilder",
    "DEFAULT_FORBIDDEN_CONSTANTS",
    "DEFAULT_FORBIDDEN_TOKENS",
    "LegacySyntaxDetector",
    "find_classes",
]
