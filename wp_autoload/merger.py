"""Merging of per-directory class maps into one global map."""

from __future__ import annotations

import re
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

from .logging import get_logger
from .models import Ambiguity, ClassMapEntry

# Duplicates living in test or sample trees are expected and never reported.
_FIXTURE_PATH = re.compile(r"/(test|fixture|example|stub)s?/", re.IGNORECASE)


def is_fixture_path(*paths: str, roots: Sequence[str] = ()) -> bool:
    """Return True when any of ``paths`` sits below a test-like directory.

    Paths under one of ``roots`` are matched relative to it, so a project
    checked out below e.g. ``/home/me/tests/`` is not treated as a fixture.
    """
    ordered = sorted((root.replace("\\", "/").rstrip("/") for root in roots), key=len, reverse=True)
    relative = []
    for path in paths:
        text = path.replace("\\", "/")
        for root in ordered:
            if root and text.startswith(root + "/"):
                text = text[len(root):]
                break
        relative.append(text)
    return bool(_FIXTURE_PATH.search(" ".join(relative)))


class GlobalClassMap:
    """Class map sorted by key, with the diagnostics raised while building it."""

    def __init__(self, entries: Dict[str, ClassMapEntry], ambiguities: List[Ambiguity]) -> None:
        self._entries = dict(sorted(entries.items()))
        self.ambiguities = ambiguities

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __getitem__(self, key: str) -> ClassMapEntry:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def items(self) -> Iterable[Tuple[str, ClassMapEntry]]:
        return self._entries.items()

    def as_paths(self) -> Dict[str, str]:
        return {key: entry.path for key, entry in self._entries.items()}


class ClassMapMerger:
    """Combines entry sources with a first-writer-wins rule."""

    def __init__(self, case_sensitive: bool = True, roots: Sequence[str] = ()) -> None:
        self.case_sensitive = case_sensitive
        self.roots = tuple(roots)
        self.logger = get_logger("merger")

    def key(self, name: str) -> str:
        return name if self.case_sensitive else name.lower()

    def merge(self, sources: Iterable[Iterable[ClassMapEntry]]) -> GlobalClassMap:
        """Merge ``sources`` in order; earlier sources claim names first."""
        entries: Dict[str, ClassMapEntry] = {}
        ambiguities: List[Ambiguity] = []

        for source in sources:
            for entry in source:
                key = self.key(entry.name)
                existing = entries.get(key)
                if existing is None:
                    entries[key] = entry
                    continue
                if existing.path == entry.path:
                    continue
                if is_fixture_path(existing.path, entry.path, roots=self.roots):
                    continue
                ambiguity = Ambiguity(name=entry.name, kept=existing.path, discarded=entry.path)
                ambiguities.append(ambiguity)
                self.logger.warning(ambiguity.message)

        return GlobalClassMap(entries, ambiguities)


__all__ = ["ClassMapMerger", "GlobalClassMap", "is_fixture_path"]
