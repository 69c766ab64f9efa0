"""Configuration resolution for embedgen.

Two layers live here. ``resolve_global`` and ``resolve_file`` turn flat
key/value views supplied by the host into immutable option records and never
fail: absent or malformed values fall back to their defaults. ``load_config``
reads the ``.embedgen.yml`` project file that the CLI uses to build those
key/value views.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

from .constants import (
    CONFIG_FILENAME,
    DEFAULT_NAMESPACE,
    DEFAULT_VISIBILITY,
    FILE_KEYS,
    KEY_CACHE_CONTROL,
    KEY_CLASS,
    KEY_FILE_MINIFY,
    KEY_MINIFY,
    KEY_NAMESPACE,
    KEY_PROJECT_DIR,
    KEY_REMOVE_ROUTE_EXTENSION,
    KEY_ROUTES,
    KEY_ROUTES_CACHE_CONTROL,
    KEY_VISIBILITY,
)
from .errors import ConfigError
from .models import FileOptions, GlobalOptions, MinifyOverride


def resolve_global(raw: Mapping[str, Any]) -> GlobalOptions:
    """Build the global options from build-wide properties."""
    return GlobalOptions(
        namespace=_lookup(raw, KEY_NAMESPACE) or DEFAULT_NAMESPACE,
        visibility=_lookup(raw, KEY_VISIBILITY) or DEFAULT_VISIBILITY,
        routes=parse_bool(_lookup(raw, KEY_ROUTES)),
        cache_control=_lookup(raw, KEY_ROUTES_CACHE_CONTROL),
        minify=parse_bool(_lookup(raw, KEY_MINIFY)),
        project_dir=_lookup(raw, KEY_PROJECT_DIR),
    )


def resolve_file(raw: Mapping[str, Any], file: Any) -> FileOptions:
    """Build the options for one input file from its metadata."""
    return FileOptions(
        class_name=_lookup(raw, KEY_CLASS),
        remove_route_extension=parse_bool(_lookup(raw, KEY_REMOVE_ROUTE_EXTENSION)),
        cache_control=_lookup(raw, KEY_CACHE_CONTROL),
        minify=parse_minify_override(_lookup(raw, KEY_FILE_MINIFY)),
        file=file,
    )


def parse_bool(value: Optional[str]) -> bool:
    """Lenient boolean parsing: only a literal ``true`` counts as True."""
    if not value:
        return False
    return value.strip().lower() == "true"


def parse_minify_override(value: Optional[str]) -> MinifyOverride:
    if not value:
        return MinifyOverride.INHERIT
    return MinifyOverride.FORCE_ON if parse_bool(value) else MinifyOverride.FORCE_OFF


def _lookup(raw: Mapping[str, Any], key: str) -> Optional[str]:
    value = raw.get(key)
    if not isinstance(value, str) or not value:
        return None
    return value


# ----------------------------------------------------------------------
# Project configuration file


@dataclass
class FileRule:
    """Glob-based rule attaching per-file metadata to matching inputs."""

    include: List[str]
    exclude: List[str] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)


@dataclass
class ProjectConfig:
    """Represents the settings defined in .embedgen.yml."""

    root: Path
    properties: Dict[str, str] = field(default_factory=dict)
    rules: List[FileRule] = field(default_factory=list)


def load_config(config_path: Path) -> ProjectConfig:
    """Load the project configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ProjectConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    properties: Dict[str, str] = {}
    for key, value in data.items():
        if key == "files":
            continue
        text = _as_str(value)
        if text is not None:
            properties[str(key)] = text

    rules: List[FileRule] = []
    for index, entry in enumerate(_as_list(data.get("files"))):
        if not isinstance(entry, dict):
            raise ConfigError(f"files[{index}] must be a mapping")
        include = _as_str_list(entry.get("include"))
        if not include:
            raise ConfigError(f"files[{index}] is missing an 'include' pattern")
        metadata: Dict[str, str] = {}
        for key in FILE_KEYS:
            text = _as_str(entry.get(key))
            if text is not None:
                metadata[key] = text
        rules.append(
            FileRule(
                include=include,
                exclude=_as_str_list(entry.get("exclude")),
                metadata=metadata,
            )
        )

    return ProjectConfig(root=root, properties=properties, rules=rules)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (str, int, float)):
        return str(value)
    return None


def _as_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    raise ConfigError("'files' must be a list of rules")


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "FileRule",
    "ProjectConfig",
    "load_config",
    "parse_bool",
    "parse_minify_override",
    "resolve_file",
    "resolve_global",
]
