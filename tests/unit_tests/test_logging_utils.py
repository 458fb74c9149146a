"""Unit tests for CLI logging setup."""

from __future__ import annotations

import io
import logging

import pytest

from csv_converter.logging_utils import LOGGER_NAME, setup_logging


def test_setup_logging_writes_to_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    """Ensure log records never reach stdout, which carries CSV."""
    stderr = io.StringIO()
    monkeypatch.setattr("sys.stderr", stderr)

    logger = setup_logging()
    logging.getLogger(f"{LOGGER_NAME}.application.dispatcher").info("START[%d] %s", 0, "a.xlsx")

    assert logger.level == logging.INFO
    assert "START[0] a.xlsx" in stderr.getvalue()
    assert "INFO" in stderr.getvalue()


def test_setup_logging_is_idempotent(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("sys.stderr", io.StringIO())

    setup_logging()
    logger = setup_logging(verbose=True)

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    assert not logger.propagate
