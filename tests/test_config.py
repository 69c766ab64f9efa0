"""Tests for embedgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from embedgen.config import (
    ProjectConfig,
    load_config,
    parse_bool,
    parse_minify_override,
    resolve_file,
    resolve_global,
)
from embedgen.constants import DEFAULT_NAMESPACE, DEFAULT_VISIBILITY
from embedgen.errors import ConfigError
from embedgen.models import GlobalOptions, MinifyOverride
from embedgen.sources import LocalFile


def test_resolve_global_returns_defaults_for_empty_view() -> None:
    options = resolve_global({})

    assert options == GlobalOptions(
        namespace=DEFAULT_NAMESPACE,
        visibility=DEFAULT_VISIBILITY,
        routes=False,
        cache_control=None,
        minify=False,
        project_dir=None,
    )


def test_resolve_global_reads_all_keys() -> None:
    options = resolve_global(
        {
            "root_namespace": "Site",
            "visibility": "public",
            "routes": "True",
            "routes_cache_control": "max-age=60",
            "minify": "true",
            "project_dir": "/srv/site",
        }
    )

    assert options.namespace == "Site"
    assert options.visibility == "public"
    assert options.routes is True
    assert options.cache_control == "max-age=60"
    assert options.minify is True
    assert options.project_dir == "/srv/site"


def test_resolve_global_treats_empty_and_malformed_values_as_defaults() -> None:
    options = resolve_global({"root_namespace": "", "routes": "yes", "minify": "1"})

    assert options.namespace == DEFAULT_NAMESPACE
    assert options.routes is False
    assert options.minify is False


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, False), ("", False), ("true", True), (" TRUE ", True), ("false", False), ("nope", False)],
)
def test_parse_bool_is_lenient(value, expected) -> None:
    assert parse_bool(value) is expected


def test_parse_minify_override_is_tri_state() -> None:
    assert parse_minify_override(None) is MinifyOverride.INHERIT
    assert parse_minify_override("") is MinifyOverride.INHERIT
    assert parse_minify_override("true") is MinifyOverride.FORCE_ON
    assert parse_minify_override("false") is MinifyOverride.FORCE_OFF
    assert parse_minify_override("garbage") is MinifyOverride.FORCE_OFF


def test_minify_override_resolution() -> None:
    assert MinifyOverride.INHERIT.resolve(True) is True
    assert MinifyOverride.INHERIT.resolve(False) is False
    assert MinifyOverride.FORCE_ON.resolve(False) is True
    assert MinifyOverride.FORCE_OFF.resolve(True) is False


def test_resolve_file_reads_metadata() -> None:
    handle = LocalFile("/srv/site/index.html")
    options = resolve_file(
        {
            "class": "Views",
            "remove_route_extension": "true",
            "cache_control": "no-cache",
            "minify": "false",
        },
        handle,
    )

    assert options.class_name == "Views"
    assert options.remove_route_extension is True
    assert options.cache_control == "no-cache"
    assert options.minify is MinifyOverride.FORCE_OFF
    assert options.file == handle
    assert options.included is True


def test_resolve_file_without_class_is_excluded() -> None:
    options = resolve_file({"cache_control": "no-cache"}, LocalFile("a.css"))

    assert options.class_name is None
    assert options.included is False
    assert options.minify is MinifyOverride.INHERIT


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, ProjectConfig)
    assert config.root == tmp_path.resolve()
    assert config.properties == {}
    assert config.rules == []


def test_load_config_parses_properties_and_rules(tmp_path: Path) -> None:
    (tmp_path / ".embedgen.yml").write_text(
        """
root_namespace: Site.Assets
visibility: public
routes: true
routes_cache_control: "public, max-age=3600"
minify: false
files:
  - include: "wwwroot/**/*.html"
    class: Views
    remove_route_extension: true
  - include:
      - "wwwroot/**/*.css"
      - "wwwroot/**/*.js"
    exclude: "wwwroot/vendor/"
    class: Assets
    minify: true
""",
        encoding="utf-8",
    )

    config = load_config(tmp_path)

    assert config.properties == {
        "root_namespace": "Site.Assets",
        "visibility": "public",
        "routes": "true",
        "routes_cache_control": "public, max-age=3600",
        "minify": "false",
    }
    assert len(config.rules) == 2
    views, assets = config.rules
    assert views.include == ["wwwroot/**/*.html"]
    assert views.metadata == {"class": "Views", "remove_route_extension": "true"}
    assert assets.include == ["wwwroot/**/*.css", "wwwroot/**/*.js"]
    assert assets.exclude == ["wwwroot/vendor/"]
    assert assets.metadata == {"class": "Assets", "minify": "true"}


def test_load_config_accepts_explicit_file(tmp_path: Path) -> None:
    config_file = tmp_path / "assets.yml"
    config_file.write_text("root_namespace: Custom\n", encoding="utf-8")

    config = load_config(config_file)

    assert config.properties == {"root_namespace": "Custom"}


def test_load_config_rejects_invalid_yaml(tmp_path: Path) -> None:
    (tmp_path / ".embedgen.yml").write_text("files: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_load_config_rejects_rule_without_include(tmp_path: Path) -> None:
    (tmp_path / ".embedgen.yml").write_text("files:\n  - class: Views\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="include"):
        load_config(tmp_path)


def test_load_config_rejects_non_mapping_root(tmp_path: Path) -> None:
    (tmp_path / ".embedgen.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)
