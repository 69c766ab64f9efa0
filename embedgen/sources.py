"""Host boundary: input files, configuration views, and input discovery."""

from __future__ import annotations

import hashlib
import os
import re
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Protocol, Tuple

from .config import FileRule, ProjectConfig
from .constants import CACHE_DIRNAME, KEY_PROJECT_DIR

_EXCLUDED_DIRS = {
    ".git",
    ".hg",
    ".svn",
    ".venv",
    "node_modules",
    "__pycache__",
    ".pytest_cache",
    ".idea",
    "bin",
    "obj",
    CACHE_DIRNAME,
}

_EXCLUDED_FILES = {
    ".DS_Store",
    "Thumbs.db",
}


class SourceFile(Protocol):
    """Input handle supplied by the host build."""

    @property
    def path(self) -> str:
        ...

    def read_bytes(self) -> bytes:
        ...

    def read_text(self) -> str:
        ...


@dataclass(frozen=True)
class LocalFile:
    """Source file backed by the local filesystem."""

    path: str

    def read_bytes(self) -> bytes:
        return Path(self.path).read_bytes()

    def read_text(self) -> str:
        return Path(self.path).read_text(encoding="utf-8-sig")


@dataclass(frozen=True)
class InMemoryFile:
    """Source file whose contents are held in memory (used by embedding hosts)."""

    path: str
    data: bytes

    def read_bytes(self) -> bytes:
        return self.data

    def read_text(self) -> str:
        return self.data.decode("utf-8-sig")


@dataclass
class BuildConfig:
    """Key/value configuration view with a global and a per-file scope."""

    global_properties: Dict[str, str] = field(default_factory=dict)
    file_metadata: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def for_file(self, path: str) -> Mapping[str, str]:
        return self.file_metadata.get(path, {})


def fingerprint_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def fingerprint_path(path: Path) -> str:
    """Return the content digest of a file, or an empty string when unreadable."""
    digest = hashlib.sha256()
    try:
        with path.open("rb") as handle:
            for chunk in iter(lambda: handle.read(1024 * 1024), b""):
                digest.update(chunk)
    except OSError:
        return ""
    return digest.hexdigest()


def discover_inputs(project: ProjectConfig) -> Tuple[List[LocalFile], BuildConfig]:
    """Return the input files matched by the project rules and their configuration."""
    root = project.root
    properties = dict(project.properties)
    project_dir = properties.get(KEY_PROJECT_DIR)
    if project_dir:
        properties[KEY_PROJECT_DIR] = str((root / project_dir).resolve())
    else:
        properties[KEY_PROJECT_DIR] = str(root)

    files: List[LocalFile] = []
    metadata: Dict[str, Dict[str, str]] = {}
    if not project.rules:
        return files, BuildConfig(global_properties=properties, file_metadata=metadata)

    for path in _iter_files(root):
        rel_path = path.relative_to(root).as_posix()
        merged: Dict[str, str] = {}
        matched = False
        for rule in project.rules:
            if _rule_matches(rule, rel_path):
                matched = True
                merged.update(rule.metadata)
        if not matched:
            continue
        local = LocalFile(str(path))
        files.append(local)
        metadata[local.path] = merged

    return files, BuildConfig(global_properties=properties, file_metadata=metadata)


def _rule_matches(rule: FileRule, rel_path: str) -> bool:
    if not any(_pattern_matches(rel_path, pattern) for pattern in rule.include):
        return False
    return not any(_pattern_matches(rel_path, pattern) for pattern in rule.exclude)


def _pattern_matches(path: str, pattern: str) -> bool:
    pattern = pattern.replace("\\", "/").lstrip("/")
    if pattern.endswith("/"):
        return path.startswith(pattern)
    if "/" not in pattern:
        return fnmatchcase(path.rsplit("/", 1)[-1], pattern)
    return _glob_regex(pattern).fullmatch(path) is not None


@lru_cache(maxsize=256)
def _glob_regex(pattern: str) -> "re.Pattern[str]":
    # "**/" spans zero or more directories; "*" and "?" stay within one segment.
    parts: List[str] = []
    index = 0
    while index < len(pattern):
        if pattern.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
        elif pattern.startswith("**", index):
            parts.append(".*")
            index += 2
        elif pattern[index] == "*":
            parts.append("[^/]*")
            index += 1
        elif pattern[index] == "?":
            parts.append("[^/]")
            index += 1
        else:
            parts.append(re.escape(pattern[index]))
            index += 1
    return re.compile("".join(parts))


def _iter_files(root: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        current_dir = Path(dirpath)
        dirnames[:] = sorted(name for name in dirnames if name not in _EXCLUDED_DIRS)
        for filename in sorted(filenames):
            if filename in _EXCLUDED_FILES:
                continue
            yield current_dir / filename


__all__ = [
    "BuildConfig",
    "InMemoryFile",
    "LocalFile",
    "SourceFile",
    "discover_inputs",
    "fingerprint_bytes",
    "fingerprint_path",
]
