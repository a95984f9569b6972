"""
StealthCore - Logging Tests
=============================
Unit tests for logging setup and formatters.
"""

import json
import logging

from stealth_core.logging_setup import (
    ROOT_LOGGER_NAME,
    JSONFormatter,
    PerformanceLogger,
    get_logger,
    setup_logging,
    short_hex,
)
from stealth_core.version import get_version_string, is_compatible


class TestLogging:
    """Test logging helpers"""

    def test_category_namespace(self):
        """Test category loggers live under the root namespace"""
        assert get_logger("scanner").name == f"{ROOT_LOGGER_NAME}.scanner"

    def test_json_formatter_extra_data(self):
        """Test JSON output carries extra_data"""
        record = logging.LogRecord(
            name="stealthcore.test", level=logging.INFO, pathname=__file__,
            lineno=1, msg="Scan completed", args=(), exc_info=None,
        )
        record.extra_data = {"found": 3}
        data = json.loads(JSONFormatter().format(record))
        assert data["message"] == "Scan completed"
        assert data["extra_data"] == {"found": 3}
        assert data["level"] == "INFO"

    def test_setup_logging_file(self, temp_data_dir):
        """Test rotating file handler"""
        logger = setup_logging(
            log_level="DEBUG",
            log_to_file=True,
            log_dir=temp_data_dir,
            enable_console=False,
        )
        logger.info("hello", extra_data={"curve": "bn254"})
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.flush()

        line = (temp_data_dir / "stealthcore.log").read_text().strip().splitlines()[-1]
        assert json.loads(line)["extra_data"] == {"curve": "bn254"}
        setup_logging(enable_console=False)

    def test_context(self, caplog):
        """Test context merged into extra_data"""
        setup_logging(log_level="DEBUG", enable_console=False)
        logger = get_logger("context")
        logger.set_context(curve="bls12_381")
        with caplog.at_level(logging.INFO, logger=logger.name):
            logger.info("with context", extra_data={"n": 1})
        assert caplog.records[-1].extra_data == {"curve": "bls12_381", "n": 1}
        logger.clear_context()

    def test_performance_logger(self):
        """Test elapsed time recorded"""
        with PerformanceLogger(get_logger("perf"), "noop") as perf:
            pass
        assert perf.elapsed_ms is not None
        assert perf.elapsed_ms >= 0

    def test_short_hex(self):
        """Test truncated hex"""
        assert short_hex(b"\x01\x02") == "0102"
        assert short_hex(b"\xff" * 16) == "f" * 16 + "..."


class TestVersion:
    """Test version helpers"""

    def test_version_string(self):
        """Test current version"""
        assert get_version_string() == "0.1.0"

    def test_compatibility(self):
        """Test 0.x compatibility rule"""
        assert is_compatible("0.1.5")
        assert not is_compatible("0.2.0")
