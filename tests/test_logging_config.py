"""
Tests of ebfstat.logging_config
"""

from __future__ import annotations

import logging

from ebfstat.logging_config import create_logger


def test_create_logger_with_file(tmp_path):
    logger = create_logger("ebfstat_test_logger", "debug", log_dir=str(tmp_path))
    try:
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert len(logger.handlers) == 2

        logger.info("loaded %d rows", 3)
        for h in logger.handlers:
            h.flush()

        text = (tmp_path / "ebfstat_test_logger.log").read_text(encoding="utf-8")
        assert "INFO - loaded 3 rows" in text
    finally:
        for h in logger.handlers[:]:
            h.close()
            logger.removeHandler(h)


def test_create_logger_replaces_handlers():
    logger = create_logger("ebfstat_test_console")
    logger = create_logger("ebfstat_test_console", logging.WARNING)
    try:
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING
    finally:
        for h in logger.handlers[:]:
            logger.removeHandler(h)
