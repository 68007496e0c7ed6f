#!/usr/bin/env python3
"""
Tests for the filemover logging configuration.
"""

import logging
import shutil
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

# Add src directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from filemover.logging_setup import (
    LOGGER_NAME,
    MonthlyRotatingFileHandler,
    setup_logging,
    shutdown_logging,
)


class TestLoggingSetup(unittest.TestCase):
    """Test cases for setup_logging."""

    def setUp(self) -> None:
        self.test_dir = Path(tempfile.mkdtemp())
        self.log_file = self.test_dir / "log.txt"

    def tearDown(self) -> None:
        shutdown_logging(logging.getLogger(LOGGER_NAME))
        shutil.rmtree(self.test_dir)

    def test_setup_logging_info_level(self) -> None:
        """Test logging setup with INFO level."""
        logger = setup_logging(verbose=False, log_file=self.log_file)

        self.assertEqual(logger.name, LOGGER_NAME)
        self.assertEqual(logger.level, logging.INFO)

    def test_setup_logging_debug_level(self) -> None:
        """Test logging setup with DEBUG level."""
        logger = setup_logging(verbose=True, log_file=self.log_file)

        self.assertEqual(logger.level, logging.DEBUG)

    def test_console_and_file_handlers(self) -> None:
        """Test that both console and file output are configured."""
        logger = setup_logging(log_file=self.log_file)

        handler_types = sorted(type(h).__name__ for h in logger.handlers)
        self.assertEqual(handler_types, ["MonthlyRotatingFileHandler", "StreamHandler"])

    def test_setup_logging_twice_replaces_handlers(self) -> None:
        """Test that repeated setup does not duplicate output."""
        setup_logging(log_file=self.log_file)
        logger = setup_logging(log_file=self.log_file)

        self.assertEqual(len(logger.handlers), 2)

    def test_shutdown_logging_flushes_file(self) -> None:
        """Test that messages are on disk after shutdown."""
        with patch.object(
            MonthlyRotatingFileHandler, "_month_stamp", return_value="202610"
        ):
            logger = setup_logging(log_file=self.log_file)
            logger.getChild("main").info("Copying file a.txt")
            shutdown_logging(logger)

        self.assertEqual(logger.handlers, [])
        content = (self.test_dir / "log202610.txt").read_text(encoding="utf-8")
        self.assertIn("[INFO] Copying file a.txt", content)


class TestMonthlyRotatingFileHandler(unittest.TestCase):
    """Test cases for MonthlyRotatingFileHandler."""

    def setUp(self) -> None:
        self.test_dir = Path(tempfile.mkdtemp())
        self.logger = logging.getLogger("filemover.tests.rotation")
        self.logger.setLevel(logging.INFO)
        self.logger.propagate = False
        self.month_patch = patch.object(
            MonthlyRotatingFileHandler, "_month_stamp", return_value="202610"
        )
        self.mock_month = self.month_patch.start()

    def tearDown(self) -> None:
        self.month_patch.stop()
        shutdown_logging(self.logger)
        shutil.rmtree(self.test_dir)

    def _attach(self, **kwargs) -> MonthlyRotatingFileHandler:
        handler = MonthlyRotatingFileHandler(self.test_dir / "log.txt", **kwargs)
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.logger.addHandler(handler)
        return handler

    def test_file_name_carries_month(self) -> None:
        """Test that the month is inserted before the extension."""
        handler = self._attach()
        self.logger.info("first")
        handler.flush()

        self.assertEqual(Path(handler.baseFilename).name, "log202610.txt")
        self.assertEqual(
            (self.test_dir / "log202610.txt").read_text(encoding="utf-8"), "first\n"
        )

    def test_no_file_before_first_message(self) -> None:
        """Test that the log file is created lazily."""
        self._attach()

        self.assertEqual(list(self.test_dir.iterdir()), [])

    def test_new_month_switches_file(self) -> None:
        """Test that a month change starts a new file."""
        handler = self._attach()
        self.logger.info("october")
        self.mock_month.return_value = "202611"
        self.logger.info("november")
        handler.flush()

        self.assertEqual(handler.current_month, "202611")
        self.assertEqual(
            (self.test_dir / "log202610.txt").read_text(encoding="utf-8"), "october\n"
        )
        self.assertEqual(
            (self.test_dir / "log202611.txt").read_text(encoding="utf-8"), "november\n"
        )

    def test_rolls_over_on_size(self) -> None:
        """Test size based rollover within a month."""
        handler = self._attach(max_bytes=100, backup_count=2)
        for i in range(20):
            self.logger.info(f"message number {i:02d} padded out")
        handler.flush()

        self.assertTrue((self.test_dir / "log202610.txt").exists())
        self.assertTrue((self.test_dir / "log202610.txt.1").exists())
        self.assertTrue((self.test_dir / "log202610.txt.2").exists())
        self.assertFalse((self.test_dir / "log202610.txt.3").exists())
        self.assertLessEqual((self.test_dir / "log202610.txt").stat().st_size, 100)


if __name__ == "__main__":
    unittest.main()
