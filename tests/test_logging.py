"""Tests for doclets.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from doclets.logging import configure_logging, console_level, get_logger


def test_console_level() -> None:
    assert console_level() == logging.WARNING
    assert console_level(verbose=True) == logging.DEBUG
    assert console_level(quiet=True) == logging.ERROR
    assert console_level(verbose=True, quiet=True) == logging.DEBUG


def test_get_logger_uses_the_doclets_hierarchy() -> None:
    assert get_logger().name == "doclets"
    assert get_logger("xref").name == "doclets.xref"


def test_configure_logging_replaces_handlers(tmp_path: Path) -> None:
    logger = configure_logging(quiet=True, log_file=tmp_path / "run.log")

    assert logger.level == logging.DEBUG
    assert [handler.level for handler in logger.handlers] == [logging.ERROR, logging.DEBUG]

    logger = configure_logging()

    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    assert logger.propagate is False
