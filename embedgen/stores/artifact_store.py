"""Persistent store for file artifacts between processes."""

from __future__ import annotations

import json
import threading
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

from ..models import FileArtifact

_STORE_VERSION = 1

Dependencies = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class StoredArtifact:
    """An artifact restored from disk together with its template dependencies."""

    artifact: FileArtifact
    dependencies: Dependencies


class ArtifactStore:
    """Stores artifacts keyed by source path and input fingerprint."""

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._entries: Dict[str, Dict[str, object]] = {}
        self._dirty = False
        self._lock = threading.Lock()
        if self._path is not None:
            self._load(self._path)

    def get(self, key: str, *, fingerprint: str) -> Optional[StoredArtifact]:
        with self._lock:
            entry = self._entries.get(key)
        if not entry:
            return None
        if entry.get("fingerprint") != fingerprint:
            return None
        artifact = _artifact_from_dict(entry.get("artifact"))
        if artifact is None:
            return None
        dependencies = _dependencies_from_dict(entry.get("dependencies"))
        if dependencies is None:
            return None
        return StoredArtifact(artifact=artifact, dependencies=dependencies)

    def store(
        self,
        key: str,
        *,
        fingerprint: str,
        artifact: FileArtifact,
        dependencies: Dependencies = (),
    ) -> None:
        entry = {
            "fingerprint": fingerprint,
            "artifact": asdict(artifact),
            "dependencies": {path: digest for path, digest in dependencies},
            "updated_at": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        }
        with self._lock:
            self._entries[key] = entry
            self._dirty = True

    def prune(self, keys_to_keep: Iterable[str]) -> None:
        keep = set(keys_to_keep)
        with self._lock:
            removed = [key for key in self._entries if key not in keep]
            if removed:
                for key in removed:
                    self._entries.pop(key, None)
                self._dirty = True

    def persist(self) -> None:
        with self._lock:
            if not self._dirty or self._path is None:
                return
            payload = {
                "version": _STORE_VERSION,
                "entries": self._entries,
            }
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8"
            )
            self._dirty = False

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._dirty = True

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # ------------------------------------------------------------------
    # Internal helpers

    def _load(self, path: Path) -> None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return
        except (OSError, json.JSONDecodeError):
            return
        if not isinstance(data, dict) or data.get("version") != _STORE_VERSION:
            return
        entries = data.get("entries")
        if not isinstance(entries, dict):
            return
        valid_entries: Dict[str, Dict[str, object]] = {}
        for key, raw in entries.items():
            if not isinstance(key, str) or not isinstance(raw, dict):
                continue
            if "fingerprint" not in raw or "artifact" not in raw:
                continue
            valid_entries[key] = raw
        self._entries = valid_entries
        self._dirty = False


def _artifact_from_dict(payload: object) -> Optional[FileArtifact]:
    if not isinstance(payload, dict):
        return None
    strings = ("class_name", "relative_path", "extension", "content")
    if not all(isinstance(payload.get(name), str) for name in strings):
        return None
    flags = ("remove_route_extension", "should_minify")
    if not all(isinstance(payload.get(name), bool) for name in flags):
        return None
    cache_control = payload.get("cache_control")
    if cache_control is not None and not isinstance(cache_control, str):
        return None
    return FileArtifact(
        class_name=payload["class_name"],
        relative_path=payload["relative_path"],
        extension=payload["extension"],
        content=payload["content"],
        remove_route_extension=payload["remove_route_extension"],
        cache_control=cache_control,
        should_minify=payload["should_minify"],
    )


def _dependencies_from_dict(payload: object) -> Optional[Dependencies]:
    if payload is None:
        return ()
    if not isinstance(payload, dict):
        return None
    pairs = []
    for path, digest in payload.items():
        if not isinstance(path, str) or not isinstance(digest, str):
            return None
        pairs.append((path, digest))
    return tuple(sorted(pairs))


__all__ = ["ArtifactStore", "StoredArtifact"]
