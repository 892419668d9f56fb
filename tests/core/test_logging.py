"""Tests for inkwell.core.utils.logging."""

import logging
import sys

import pytest
from loguru import logger

from inkwell.core.utils.logging import setup_logging


@pytest.fixture(autouse=True)
def _restore_loguru():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_file_sink_respects_level(tmp_path):
    log_file = tmp_path / "inkwell.log"
    setup_logging(level="info", log_file=str(log_file))

    logger.info("diary opened")
    logger.debug("not for the file")
    logger.remove()

    text = log_file.read_text()
    assert "diary opened" in text
    assert "not for the file" not in text
    assert "| INFO |" in text


def test_scheduler_records_are_routed_to_loguru(tmp_path):
    log_file = tmp_path / "inkwell.log"
    setup_logging(level="WARNING", log_file=str(log_file))

    logging.getLogger("apscheduler.scheduler").warning("Run time of job was missed")
    logging.getLogger("apscheduler.scheduler").info("Added job")
    logger.remove()

    text = log_file.read_text()
    assert "Run time of job was missed" in text
    assert "Added job" not in text


def test_debug_lets_scheduler_chatter_through(tmp_path):
    log_file = tmp_path / "inkwell.log"
    setup_logging(level="debug", log_file=str(log_file))

    logging.getLogger("apscheduler.executors.default").info("Job executed successfully")
    logger.remove()

    assert "Job executed successfully" in log_file.read_text()
