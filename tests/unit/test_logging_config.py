"""
ImputeLab - Unit Tests for logging configuration
"""

import logging

import pytest
from loguru import logger

from config.logging_config import LogContext, get_logger, log_execution_time, setup_logging


@pytest.fixture
def captured():
    records = []
    sink_id = logger.add(lambda m: records.append(m.record), level="DEBUG")
    yield records
    logger.remove(sink_id)


class TestLogging:
    """Tests for loguru helpers"""

    def test_setup_is_idempotent(self):
        setup_logging(reset_existing=True)
        setup_logging()

    def test_stdlib_logging_intercepted(self):
        setup_logging(reset_existing=True)
        records = []
        sink_id = logger.add(lambda m: records.append(m.record), level="DEBUG")
        try:
            logging.getLogger("statsmodels").warning("convergence")
        finally:
            logger.remove(sink_id)
        record = next(r for r in records if r["message"] == "convergence")
        assert record["extra"]["component"] == "statsmodels"
        assert record["extra"]["strategy"] == "-"

    def test_bound_logger(self, captured):
        get_logger("tests", component="cli").info("hello")
        record = captured[-1]
        assert record["extra"]["name"] == "tests"
        assert record["extra"]["component"] == "cli"

    def test_log_context(self, captured):
        with LogContext(strategy="knn"):
            logger.info("inside")
        assert captured[-1]["extra"]["strategy"] == "knn"

    def test_execution_time_decorator(self, captured):
        @log_execution_time
        def add(a, b):
            return a + b

        assert add(1, 2) == 3
        assert any("Completed add" in r["message"] for r in captured)

    def test_execution_time_reraises(self):
        @log_execution_time
        def fail():
            raise KeyError("x")

        with pytest.raises(KeyError):
            fail()
