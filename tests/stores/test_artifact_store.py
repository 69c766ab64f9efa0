"""Tests for the persistent artifact store."""

from __future__ import annotations

import json
from pathlib import Path

from embedgen.models import FileArtifact
from embedgen.stores import ArtifactStore

ARTIFACT = FileArtifact(
    class_name="Views",
    relative_path="index.html",
    extension=".html",
    content='@"<p>hi</p>"',
    remove_route_extension=True,
    cache_control=None,
    should_minify=False,
)


def test_artifact_store_round_trip(tmp_path: Path) -> None:
    store_path = tmp_path / "artifacts.json"
    store = ArtifactStore(store_path)
    store.store(
        "/p/index.html",
        fingerprint="fp-abc",
        artifact=ARTIFACT,
        dependencies=(("/p/partials/nav.html", "d1"),),
    )
    store.persist()

    loaded = ArtifactStore(store_path)
    restored = loaded.get("/p/index.html", fingerprint="fp-abc")

    assert restored is not None
    assert restored.artifact == ARTIFACT
    assert restored.dependencies == (("/p/partials/nav.html", "d1"),)


def test_artifact_store_invalidates_on_fingerprint_change(tmp_path: Path) -> None:
    store = ArtifactStore(tmp_path / "artifacts.json")
    store.store("/p/index.html", fingerprint="fp", artifact=ARTIFACT)

    assert store.get("/p/index.html", fingerprint="fp") is not None
    assert store.get("/p/index.html", fingerprint="fp-changed") is None
    assert store.get("/p/other.html", fingerprint="fp") is None


def test_artifact_store_prune_removes_unused(tmp_path: Path) -> None:
    store = ArtifactStore(tmp_path / "artifacts.json")
    store.store("a", fingerprint="fp", artifact=ARTIFACT)
    store.store("b", fingerprint="fp", artifact=ARTIFACT)

    store.prune(["a"])
    store.persist()

    reloaded = ArtifactStore(tmp_path / "artifacts.json")
    assert len(reloaded) == 1
    assert reloaded.get("a", fingerprint="fp") is not None
    assert reloaded.get("b", fingerprint="fp") is None


def test_artifact_store_ignores_unknown_version(tmp_path: Path) -> None:
    store_path = tmp_path / "artifacts.json"
    store_path.write_text(json.dumps({"version": 99, "entries": {"a": {}}}), encoding="utf-8")

    assert len(ArtifactStore(store_path)) == 0


def test_artifact_store_ignores_corrupt_file(tmp_path: Path) -> None:
    store_path = tmp_path / "artifacts.json"
    store_path.write_text("{not json", encoding="utf-8")

    assert len(ArtifactStore(store_path)) == 0


def test_artifact_store_rejects_malformed_artifact(tmp_path: Path) -> None:
    store_path = tmp_path / "artifacts.json"
    payload = {
        "version": 1,
        "entries": {"a": {"fingerprint": "fp", "artifact": {"class_name": 3}}},
    }
    store_path.write_text(json.dumps(payload), encoding="utf-8")

    assert ArtifactStore(store_path).get("a", fingerprint="fp") is None


def test_in_memory_store_never_writes(tmp_path: Path) -> None:
    store = ArtifactStore(None)
    store.store("a", fingerprint="fp", artifact=ARTIFACT)
    store.persist()

    assert store.get("a", fingerprint="fp") is not None
    assert list(tmp_path.iterdir()) == []
