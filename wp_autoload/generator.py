"""Orchestration of a loader generation run."""

from __future__ import annotations

import os
import re
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from .autoloads import collect_autoloads, namespace_scan_order
from .config import GeneratorConfig
from .logging import get_logger
from .merger import ClassMapMerger, GlobalClassMap
from .models import Ambiguity, ClassMapEntry, GeneratedArtifactSet, PackageAutoloadDeclaration
from .paths import normalize_path
from .rendering import ArtifactAssembler, AssemblyContext, FileInclude
from .rendering.assembler import BOOTSTRAP_FILE, INCLUDE_PATHS_FILE
from .scanners import ClassMapBuilder, LegacySyntaxDetector


def random_suffix() -> str:
    """Return a 32 character hexadecimal disambiguation token."""
    return uuid.uuid4().hex


@dataclass
class GenerationResult:
    """Outcome of a generation run."""

    suffix: str
    vendor_path: Path
    class_map: GlobalClassMap
    artifacts: GeneratedArtifactSet
    written: List[Path] = field(default_factory=list)

    @property
    def ambiguities(self) -> List[Ambiguity]:
        return self.class_map.ambiguities

    @property
    def bootstrap_path(self) -> Path:
        return self.vendor_path / BOOTSTRAP_FILE


class AutoloadGenerator:
    """Builds the class map and writes the WordPress loader files."""

    def __init__(
        self,
        builder: ClassMapBuilder | None = None,
        detector: LegacySyntaxDetector | None = None,
        assembler: ArtifactAssembler | None = None,
        token_factory: Callable[[], str] | None = None,
    ) -> None:
        self.builder = builder or ClassMapBuilder()
        self.detector = detector or LegacySyntaxDetector()
        self.assembler = assembler or ArtifactAssembler()
        self._token_factory = token_factory or random_suffix
        self.logger = get_logger("generator")

    def generate(
        self,
        config: GeneratorConfig,
        packages: Sequence[PackageAutoloadDeclaration],
        main_package: PackageAutoloadDeclaration,
        scan_all_source_roots: bool = False,
        suffix: Optional[str] = None,
    ) -> GenerationResult:
        """Generate and write every loader file for ``packages``.

        Write failures propagate; files written before the failure remain.
        """
        if config.classmap_authoritative or config.optimize:
            scan_all_source_roots = True

        vendor_dir = Path(config.vendor_dir)
        vendor_dir.mkdir(parents=True, exist_ok=True)
        base_path = normalize_path(Path(config.base_path).resolve())
        vendor_path = normalize_path(vendor_dir.resolve())
        target_dir = config.target_dir.strip("/")
        (Path(vendor_path) / target_dir).mkdir(parents=True, exist_ok=True)

        run_suffix = suffix or config.suffix or self._token_factory()
        self.logger.info("Generating WordPress autoloader in %s", vendor_path)

        autoloads = collect_autoloads(main_package, packages, base_path)
        exclude = re.compile(autoloads.exclude_pattern) if autoloads.exclude_pattern else None

        sources: List[Iterable[ClassMapEntry]] = []
        if scan_all_source_roots:
            for namespace, paths in namespace_scan_order(autoloads):
                for directory in paths:
                    if not os.path.isdir(directory):
                        continue
                    sources.append(self.builder.scan(directory, exclude, namespace or None))
        for path in autoloads.classmap:
            sources.append(self.builder.scan(path, exclude))

        merger = ClassMapMerger(case_sensitive=config.case_sensitive, roots=(vendor_path, base_path))
        class_map = merger.merge(sources)
        self.logger.debug("Class map holds %d entries", len(class_map))

        files: List[FileInclude] = []
        for path in autoloads.files:
            supported = not self.detector.uses_unsupported_syntax(path)
            if not supported:
                self.logger.info("Disabling include of %s: syntax unsupported by PHP 5.2", path)
            files.append(FileInclude(path=path, supported=supported))

        context = AssemblyContext(
            suffix=run_suffix,
            base_path=base_path,
            vendor_path=vendor_path,
            target_dir=target_dir,
            class_map=class_map,
            autoloads=autoloads,
            main_package=main_package,
            files=files,
            use_global_include_path=config.use_include_path,
            prepend_autoloader=config.prepend_autoloader,
            classmap_authoritative=config.classmap_authoritative,
            case_sensitive=config.case_sensitive,
            class_root=config.class_root,
        )
        artifacts = self.assembler.assemble(context)

        result = GenerationResult(
            suffix=run_suffix,
            vendor_path=Path(vendor_path),
            class_map=class_map,
            artifacts=artifacts,
        )
        for relative, text in artifacts.files.items():
            destination = Path(vendor_path) / relative
            with destination.open("w", encoding="utf-8", newline="\n") as handle:
                handle.write(text)
            result.written.append(destination)

        if INCLUDE_PATHS_FILE not in artifacts:
            (Path(vendor_path) / INCLUDE_PATHS_FILE).unlink(missing_ok=True)

        self.logger.info("Wrote %d loader files", len(result.written))
        return result


__all__ = ["AutoloadGenerator", "GenerationResult", "random_suffix"]
