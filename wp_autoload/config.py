"""Configuration loading for wp-autoload (composer.json and .wp-autoload.yml)."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .paths import normalize_path

CONFIG_FILENAME = ".wp-autoload.yml"
COMPOSER_FILENAME = "composer.json"
EXTRA_KEY = "wordpress-autoloader"


class ConfigError(RuntimeError):
    """Raised when a configuration file cannot be parsed."""


@dataclass
class GeneratorConfig:
    """Settings for one loader generation run."""

    base_path: Path
    vendor_dir: Path
    target_dir: str = "composer"
    use_include_path: bool = False
    prepend_autoloader: bool = True
    classmap_authoritative: bool = False
    suffix: Optional[str] = None
    case_sensitive: bool = True
    class_root: Optional[str] = None
    optimize: bool = False

    @classmethod
    def for_project(cls, base_path: Path, vendor_dir: str | Path = "vendor", **kwargs: Any) -> "GeneratorConfig":
        base = Path(base_path).expanduser().resolve()
        return cls(base_path=base, vendor_dir=_resolve_dir(base, vendor_dir), **kwargs)


def load_config(path: Path) -> GeneratorConfig:
    """Load generator settings for the project at ``path``.

    Composer's own ``config`` and ``extra.wordpress-autoloader`` sections are
    read first; ``.wp-autoload.yml`` overrides them when present.
    """
    project_root = _resolve_project_root(path)

    values: Dict[str, Any] = {}
    values.update(_read_composer_settings(project_root / COMPOSER_FILENAME))
    values.update(_read_override_settings(project_root / CONFIG_FILENAME))

    vendor_dir = _as_str(values.pop("vendor_dir", None)) or "vendor"
    config = GeneratorConfig.for_project(project_root, vendor_dir)

    target_dir = _as_str(values.get("target_dir"))
    if target_dir is not None:
        config.target_dir = normalize_path(target_dir).strip("/")
        if not config.target_dir:
            raise ConfigError(f"target-dir {target_dir!r} must name a directory below the vendor dir")
    for key in ("use_include_path", "prepend_autoloader", "classmap_authoritative", "case_sensitive", "optimize"):
        flag = _as_bool(values.get(key))
        if flag is not None:
            setattr(config, key, flag)
    config.suffix = _as_str(values.get("suffix")) or None
    config.class_root = _as_str(values.get("class_root")) or None
    return config


def _resolve_project_root(path: Path) -> Path:
    path = Path(path).expanduser()
    if path.is_dir():
        return path.resolve()
    return path.parent.resolve()


def _resolve_dir(base: Path, directory: str | Path) -> Path:
    candidate = Path(directory).expanduser()
    if not candidate.is_absolute():
        candidate = base / candidate
    return candidate


def _read_composer_settings(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain an object at the root")

    composer_config = _as_dict(data.get("config"))
    extra = _as_dict(_as_dict(data.get("extra")).get(EXTRA_KEY))

    settings: Dict[str, Any] = {}
    mapping = {
        "vendor-dir": "vendor_dir",
        "use-include-path": "use_include_path",
        "prepend-autoloader": "prepend_autoloader",
        "classmap-authoritative": "classmap_authoritative",
        "autoloader-suffix": "suffix",
    }
    for source_key, target_key in mapping.items():
        if source_key in composer_config:
            settings[target_key] = composer_config[source_key]
    if "class-root" in extra:
        settings["class_root"] = extra["class-root"]
    if "case-sensitive" in extra:
        settings["case_sensitive"] = extra["case-sensitive"]
    return settings


def _read_override_settings(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")
    return {str(key).replace("-", "_"): value for key, value in loaded.items()}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = ["ConfigError", "GeneratorConfig", "load_config"]
