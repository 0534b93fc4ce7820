"""Tests for logging setup."""

import io
import logging

import pytest

from ledgerkit.logging_config import configure_logging, parse_level


def test_parse_level():
    assert parse_level("info") == logging.INFO
    assert parse_level(" Debug ") == logging.DEBUG
    assert parse_level(logging.ERROR) == logging.ERROR
    with pytest.raises(ValueError, match="Unknown log level"):
        parse_level("chatty")


def test_configure_logging_is_idempotent():
    stream = io.StringIO()
    configure_logging("INFO", stream=stream)
    configure_logging("DEBUG")

    logger = logging.getLogger("ledgerkit")
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1

    logging.getLogger("ledgerkit.domain.reports").debug("net income checked")
    assert "DEBUG ledgerkit.domain.reports: net income checked" in stream.getvalue()
