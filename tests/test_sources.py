"""Tests for input discovery and the host file handles."""

from __future__ import annotations

from pathlib import Path

import pytest

from embedgen.config import FileRule, ProjectConfig
from embedgen.sources import InMemoryFile, LocalFile, discover_inputs, fingerprint_path


def _touch(root: Path, relative: str, content: str = "x") -> None:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_discover_inputs_matches_rules_and_merges_metadata(tmp_path: Path) -> None:
    for relative in (
        "wwwroot/index.html",
        "wwwroot/blog/index.htm",
        "wwwroot/site.css",
        "wwwroot/vendor/lib.css",
        "README.md",
        "node_modules/pkg/index.html",
    ):
        _touch(tmp_path, relative)

    project = ProjectConfig(
        root=tmp_path,
        properties={"routes": "true"},
        rules=[
            FileRule(include=["wwwroot/**"], exclude=["wwwroot/vendor/"], metadata={"class": "Site"}),
            FileRule(include=["*.html", "*.htm"], metadata={"remove_route_extension": "true"}),
        ],
    )

    files, config = discover_inputs(project)

    relative = [Path(file.path).relative_to(tmp_path).as_posix() for file in files]
    assert relative == ["wwwroot/index.html", "wwwroot/site.css", "wwwroot/blog/index.htm"]
    html_meta = config.for_file(str(tmp_path / "wwwroot" / "index.html"))
    assert html_meta == {"class": "Site", "remove_route_extension": "true"}
    css_meta = config.for_file(str(tmp_path / "wwwroot" / "site.css"))
    assert css_meta == {"class": "Site"}
    assert config.global_properties["routes"] == "true"
    assert config.global_properties["project_dir"] == str(tmp_path)


def test_discover_inputs_resolves_relative_project_dir(tmp_path: Path) -> None:
    _touch(tmp_path, "wwwroot/app.js")
    project = ProjectConfig(
        root=tmp_path,
        properties={"project_dir": "wwwroot"},
        rules=[FileRule(include=["**/*.js"], metadata={"class": "Scripts"})],
    )

    files, config = discover_inputs(project)

    assert [Path(file.path).name for file in files] == ["app.js"]
    assert config.global_properties["project_dir"] == str((tmp_path / "wwwroot").resolve())


def test_discover_inputs_without_rules_finds_nothing(tmp_path: Path) -> None:
    _touch(tmp_path, "index.html")

    files, config = discover_inputs(ProjectConfig(root=tmp_path))

    assert files == []
    assert config.file_metadata == {}


def test_for_file_returns_empty_mapping_for_unknown_path(tmp_path: Path) -> None:
    _, config = discover_inputs(ProjectConfig(root=tmp_path))

    assert config.for_file("missing.html") == {}


def test_local_file_reads_text_and_bytes(tmp_path: Path) -> None:
    target = tmp_path / "page.html"
    target.write_bytes("\ufeff<p>héllo</p>".encode("utf-8"))
    handle = LocalFile(str(target))

    assert handle.read_text() == "<p>héllo</p>"
    assert handle.read_bytes().startswith(b"\xef\xbb\xbf")


def test_local_file_text_read_fails_for_invalid_utf8(tmp_path: Path) -> None:
    target = tmp_path / "blob.txt"
    target.write_bytes(b"\xff\xfe\xfa")

    with pytest.raises(UnicodeDecodeError):
        LocalFile(str(target)).read_text()


def test_in_memory_file_equality_is_structural() -> None:
    assert InMemoryFile("a.css", b"body{}") == InMemoryFile("a.css", b"body{}")
    assert InMemoryFile("a.css", b"body{}") != InMemoryFile("a.css", b"p{}")
    assert InMemoryFile("a.css", b"body{}").read_text() == "body{}"


def test_fingerprint_path_is_empty_for_missing_file(tmp_path: Path) -> None:
    assert fingerprint_path(tmp_path / "missing") == ""
    _touch(tmp_path, "present", "data")
    assert len(fingerprint_path(tmp_path / "present")) == 64
