"""
Tests for the logger module.
"""

import logging
import unittest
import os
import tempfile
from utils.logger import Logger, logger, setup_logger
import config

class TestLogger(unittest.TestCase):
    """Tests for the logger module."""

    def test_logger_creation(self):
        self.assertIs(setup_logger(), logger)

    def test_log_file_created(self):
        self.assertTrue(os.path.exists(logger.log_file))
        self.assertEqual(os.path.dirname(logger.log_file), config.LOGS_DIR)
        self.assertTrue(os.path.basename(logger.log_file).startswith('tweet_saver_'))

    def test_prefixed_levels(self):
        with self.assertLogs('tweet_saver', level='INFO') as captured:
            logger.warn("sheet is slow")
            logger.success("row appended")
            logger.error("write failed")
        self.assertEqual(
            captured.output,
            [
                "WARNING:tweet_saver:⚠️ sheet is slow",
                "INFO:tweet_saver:✅ row appended",
                "ERROR:tweet_saver:write failed",
            ]
        )

    def test_summary_line(self):
        with self.assertLogs('tweet_saver', level='INFO') as captured:
            logger.summary("Poll complete", {"appended": 2, "updated": 0})
        self.assertEqual(captured.output, ["INFO:tweet_saver:Poll complete: 2 appended, 0 updated"])

    def test_level_and_directory_are_configurable(self):
        with tempfile.TemporaryDirectory() as log_dir:
            quiet = Logger(log_dir=os.path.join(log_dir, "run"), level="warning", name="tweet_saver_quiet")
            try:
                self.assertTrue(os.path.exists(quiet.log_file))
                self.assertFalse(quiet._logger.isEnabledFor(logging.INFO))
                self.assertTrue(quiet._logger.isEnabledFor(logging.WARNING))
            finally:
                for handler in list(quiet._logger.handlers):
                    handler.close()
                    quiet._logger.removeHandler(handler)

if __name__ == '__main__':
    unittest.main()
