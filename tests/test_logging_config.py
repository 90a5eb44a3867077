"""Tests for logging setup."""

import logging

import pytest

from exledger.logging_config import LOGGER_NAME, configure_logging, reset_logging


def own_handlers():
    return [h for h in logging.getLogger(LOGGER_NAME).handlers if getattr(h, "_exledger_handler", False)]


def test_configure_installs_one_handler():
    configure_logging("info")
    configure_logging("DEBUG")

    logger = logging.getLogger(LOGGER_NAME)
    assert len(own_handlers()) == 1
    assert logger.level == logging.DEBUG
    assert logger.propagate is False


def test_numeric_level_accepted():
    assert configure_logging(logging.ERROR).level == logging.ERROR


def test_unknown_level_rejected():
    with pytest.raises(ValueError, match="Unknown log level"):
        configure_logging("chatty")


def test_reset_restores_propagation():
    configure_logging("INFO")
    reset_logging()

    logger = logging.getLogger(LOGGER_NAME)
    assert own_handlers() == []
    assert logger.propagate is True
    assert logger.level == logging.NOTSET
