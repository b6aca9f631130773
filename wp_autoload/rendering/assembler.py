"""Renders the PHP loader files from templates."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..merger import GlobalClassMap
from ..models import AutoloadSet, GeneratedArtifactSet, PackageAutoloadDeclaration
from ..paths import PathExpression, PathResolver, export_string, normalize_path

BOOTSTRAP_FILE = "autoload_wordpress.php"
REAL_LOADER_FILE = "autoload_real_wordpress.php"
CLASSMAP_FILE = "autoload_classmap_wordpress.php"
NAMESPACES_FILE = "autoload_namespaces_wordpress.php"
PSR4_FILE = "autoload_psr4_wordpress.php"
INCLUDE_PATHS_FILE = "include_paths_wordpress.php"
CLASS_LOADER_FILE = "ClassLoaderWordPress.php"


@dataclass(frozen=True)
class FileInclude:
    """A "files" entry and whether the target runtime can parse it."""

    path: str
    supported: bool = True


@dataclass
class AssemblyContext:
    """Everything the assembler needs for one run."""

    suffix: str
    base_path: str
    vendor_path: str
    target_dir: str
    class_map: GlobalClassMap
    autoloads: AutoloadSet
    main_package: PackageAutoloadDeclaration
    files: List[FileInclude] = field(default_factory=list)
    use_global_include_path: bool = False
    prepend_autoloader: bool = True
    classmap_authoritative: bool = False
    case_sensitive: bool = True
    class_root: Optional[str] = None

    @property
    def target_path(self) -> str:
        """Absolute directory holding the real loader and its tables."""
        return normalize_path(f"{self.vendor_path}/{self.target_dir}")


@dataclass(frozen=True)
class _RenderedFile:
    code: str
    supported: bool


class ArtifactAssembler:
    """Assembles the loader files of a run from Jinja2 templates."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def assemble(self, context: AssemblyContext) -> GeneratedArtifactSet:
        """Return every artifact keyed by its path relative to the vendor dir."""
        resolver = PathResolver(context.base_path, context.vendor_path)
        target_path = context.target_path
        target_dir = context.target_dir.strip("/")

        vendor_dir_code = resolver.resolve(target_path, context.vendor_path).render()
        target_dir_code = resolver.resolve(context.vendor_path, target_path).render()
        base_dir_code = self.base_dir_code(resolver, context).render()

        header = {"vendor_dir_code": vendor_dir_code, "base_dir_code": base_dir_code}
        include_paths = [resolver.file_code(path) for path in context.autoloads.include_paths]

        artifacts = GeneratedArtifactSet()
        artifacts.files[BOOTSTRAP_FILE] = self.render_bootstrap(target_dir_code, context.suffix)
        artifacts.files[_artifact_key(target_dir, REAL_LOADER_FILE)] = self._render(
            REAL_LOADER_FILE,
            suffix=context.suffix,
            use_include_paths=bool(include_paths),
            use_classmap=len(context.class_map) > 0,
            classmap_authoritative=context.classmap_authoritative,
            use_global_include_path=context.use_global_include_path,
            target_dir_loader=self.target_dir_loader(resolver, context),
            prepend="true" if context.prepend_autoloader else "false",
            files=[
                _RenderedFile(resolver.file_code(item.path), item.supported) for item in context.files
            ],
            **header,
        )
        artifacts.files[_artifact_key(target_dir, CLASSMAP_FILE)] = self._render(
            CLASSMAP_FILE,
            classmap=self.classmap_rows(resolver, context.class_map),
            **header,
        )
        artifacts.files[_artifact_key(target_dir, NAMESPACES_FILE)] = self._render(
            "namespace_map.php",
            filename=NAMESPACES_FILE,
            namespaces=self.namespace_rows(resolver, context.autoloads.psr0),
            **header,
        )
        artifacts.files[_artifact_key(target_dir, PSR4_FILE)] = self._render(
            "namespace_map.php",
            filename=PSR4_FILE,
            namespaces=self.namespace_rows(resolver, context.autoloads.psr4),
            **header,
        )
        if include_paths:
            # Lives beside the bootstrap, so its anchor is the vendor dir itself.
            artifacts.files[INCLUDE_PATHS_FILE] = self._render(
                INCLUDE_PATHS_FILE,
                include_paths=include_paths,
                vendor_dir_code=resolver.resolve(context.vendor_path, context.vendor_path).render(),
                base_dir_code=base_dir_code,
            )
        artifacts.files[_artifact_key(target_dir, CLASS_LOADER_FILE)] = self.render_class_loader(
            context.case_sensitive
        )
        return artifacts

    def render_bootstrap(self, target_dir_code: str, suffix: str) -> str:
        return self._render(BOOTSTRAP_FILE, target_dir_code=target_dir_code, suffix=suffix)

    def render_class_loader(self, case_sensitive: bool) -> str:
        """Render the loader runtime; its only parameter is the case flag."""
        return self._render(CLASS_LOADER_FILE, case_sensitive=case_sensitive)

    @staticmethod
    def base_dir_code(resolver: PathResolver, context: AssemblyContext) -> PathExpression:
        expression = resolver.resolve(context.vendor_path, context.base_path, static=False)
        if context.class_root:
            expression = expression.replace_parent(context.class_root)
        return expression

    @staticmethod
    def classmap_rows(resolver: PathResolver, class_map: GlobalClassMap) -> List[Tuple[str, str]]:
        return [(export_string(key), resolver.file_code(entry.path)) for key, entry in class_map.items()]

    @staticmethod
    def namespace_rows(
        resolver: PathResolver, mapping: Dict[str, List[str]]
    ) -> List[Tuple[str, List[str]]]:
        rows: List[Tuple[str, List[str]]] = []
        for namespace in sorted(mapping, reverse=True):
            codes = [resolver.file_code(path) for path in mapping[namespace]]
            rows.append((export_string(namespace), codes))
        return rows

    @staticmethod
    def target_dir_loader(resolver: PathResolver, context: AssemblyContext) -> Optional[Dict[str, object]]:
        """Settings of the legacy target-dir shim, or None when not needed.

        Only a main package combining ``target-dir`` with PSR-0 rules gets it.
        """
        main = context.main_package
        if not main.target_dir or not main.psr0:
            return None
        levels = len(normalize_path(main.target_dir).strip("/").split("/"))
        prefixes: Sequence[str] = [export_string(prefix) for prefix in main.psr0]
        return {
            "base_dir_code": resolver.resolve(context.target_path, context.base_path).render(),
            "prefixes": ", ".join(prefixes),
            "levels": levels,
        }

    def _render(self, template_name: str, **values: object) -> str:
        template = self._env.get_template(f"{template_name}.j2")
        return template.render(**values)


def _artifact_key(target_dir: str, filename: str) -> str:
    """Path of a target-dir artifact relative to the vendor dir."""
    return f"{target_dir}/{filename}" if target_dir else filename


__all__ = [
    "ArtifactAssembler",
    "AssemblyContext",
    "BOOTSTRAP_FILE",
    "CLASSMAP_FILE",
    "CLASS_LOADER_FILE",
    "FileInclude",
    "INCLUDE_PATHS_FILE",
    "NAMESPACES_FILE",
    "PSR4_FILE",
    "REAL_LOADER_FILE",
]
