"""Tests for embedgen logging configuration."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from embedgen.logging import configure_logging, get_logger, resolve_level


@pytest.fixture(autouse=True)
def _reset_embedgen_logger():
    yield
    logger = logging.getLogger("embedgen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def test_resolve_level() -> None:
    assert resolve_level() == logging.INFO
    assert resolve_level(quiet=True) == logging.WARNING
    assert resolve_level(verbose=True, quiet=True) == logging.DEBUG


def test_get_logger_nests_components() -> None:
    assert get_logger().name == "embedgen"
    assert get_logger("graph").name == "embedgen.graph"


def test_console_names_component_in_verbose_mode(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(verbose=True)

    get_logger("cache").debug("Reusing artifact")

    assert "[embedgen:cache] DEBUG Reusing artifact" in capsys.readouterr().err


def test_quiet_console_drops_info(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(quiet=True)

    get_logger("graph").info("Built 3 artifacts")
    get_logger("diagnostics").warning("EMB001: broken")

    err = capsys.readouterr().err
    assert "Built 3 artifacts" not in err
    assert "[embedgen] WARNING EMB001: broken" in err


def test_log_file_records_debug_with_component(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "embedgen.log"
    configure_logging(quiet=True, log_file=log_file)

    get_logger("inliner").debug("Include target missing")

    assert "DEBUG inliner: Include target missing" in log_file.read_text(encoding="utf-8")


def test_reconfiguring_replaces_handlers() -> None:
    configure_logging()
    logger = configure_logging(verbose=True)

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
