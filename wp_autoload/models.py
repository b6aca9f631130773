"""Core data models shared across wp-autoload components."""

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class PackageAutoloadDeclaration:
    """Autoload section of one installed package, as resolved by the host."""

    name: str
    install_path: str
    target_dir: Optional[str] = None
    psr0: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    psr4: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)
    classmap: Tuple[str, ...] = ()
    files: Tuple[str, ...] = ()
    exclude_from_classmap: Tuple[str, ...] = ()
    include_paths: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ClassMapEntry:
    """A declared class-like symbol and the file that declares it."""

    name: str
    path: str


@dataclass(frozen=True)
class Ambiguity:
    """Two files declaring the same class; the first one is kept."""

    name: str
    kept: str
    discarded: str

    @property
    def message(self) -> str:
        return (
            f'Warning: Ambiguous class resolution, "{self.name}" was found in both '
            f'"{self.kept}" and "{self.discarded}", the first will be used.'
        )


@dataclass
class AutoloadSet:
    """Autoload rules of every package flattened into absolute paths."""

    psr0: Dict[str, List[str]] = field(default_factory=dict)
    psr4: Dict[str, List[str]] = field(default_factory=dict)
    classmap: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)
    exclude_from_classmap: List[str] = field(default_factory=list)
    include_paths: List[str] = field(default_factory=list)

    @property
    def exclude_pattern(self) -> Optional[str]:
        """Single alternation regex of every exclude fragment, if any."""
        if not self.exclude_from_classmap:
            return None
        return "(" + "|".join(self.exclude_from_classmap) + ")"


@dataclass
class GeneratedArtifactSet:
    """Rendered loader files keyed by their path relative to the vendor dir."""

    files: Dict[str, str] = field(default_factory=dict)

    def __contains__(self, name: object) -> bool:
        return name in self.files

    def __getitem__(self, name: str) -> str:
        return self.files[name]
