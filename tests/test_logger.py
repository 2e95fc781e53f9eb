# -*- coding: utf-8 -*-
"""Tests for session logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from chartroast.utils.logger import get_logger, setup_session_logging


@pytest.fixture
def clean_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    for attr in ("_chartroast_logging_configured", "_chartroast_session_log"):
        if hasattr(root, attr):
            delattr(root, attr)


def test_session_log_file_created(tmp_path: Path, clean_root_logger) -> None:
    log_path = setup_session_logging(tmp_path, "Chart Roast")
    assert log_path is not None
    assert log_path.parent == tmp_path / "logs"
    assert log_path.name.startswith("chart-roast-")
    assert log_path.exists()


def test_second_setup_returns_same_log(tmp_path: Path, clean_root_logger) -> None:
    first = setup_session_logging(tmp_path, "chart-roast")
    second = setup_session_logging(tmp_path / "other", "chart-roast")
    assert first == second


def test_level_from_environment(tmp_path: Path, clean_root_logger, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHARTROAST_LOG_LEVEL", "warning")
    setup_session_logging(tmp_path, "chart-roast")
    assert clean_root_logger.level == logging.WARNING


@pytest.fixture
def clean_package_logger():
    logger = logging.getLogger("chartroast.test")
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_get_logger_writes_to_file(tmp_path: Path, clean_package_logger) -> None:
    log_file = tmp_path / "nested" / "run.log"
    logger = get_logger("chartroast.test", log_file)
    logger.debug("[parse] strict tier failed")
    assert logger is clean_package_logger
    assert "[parse] strict tier failed" in log_file.read_text(encoding="utf-8")


def test_get_logger_does_not_add_handlers_twice(tmp_path: Path, clean_package_logger) -> None:
    get_logger("chartroast.test", tmp_path / "run.log")
    count = len(clean_package_logger.handlers)
    get_logger("chartroast.test", tmp_path / "other.log")
    assert len(clean_package_logger.handlers) == count == 2
    assert not (tmp_path / "other.log").exists()
