"""Tests for logger setup."""

import logging

import pytest

from odysis.logging_config import setup_logging


@pytest.fixture
def odysis_logger():
    logger = logging.getLogger("odysis")
    level, handlers = logger.level, list(logger.handlers)
    yield logger
    for handler in logger.handlers:
        handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_repeated_setup_replaces_handlers(odysis_logger, tmp_path):
    log_file = tmp_path / "odysis.log"
    setup_logging("DEBUG", log_file)
    setup_logging(logging.WARNING, log_file)

    assert odysis_logger.level == logging.WARNING
    assert len(odysis_logger.handlers) == 2

    logging.getLogger("odysis.core.scene").warning("scale reset")
    for handler in odysis_logger.handlers:
        handler.flush()
    assert "odysis.core.scene - WARNING - scale reset" in log_file.read_text()
