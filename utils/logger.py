import logging
import os
from datetime import datetime

from config import LOGS_DIR, LOG_LEVEL

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'

class Logger:
    """
    Process-wide logger for the tweet saver. Every run gets its own file
    under LOGS_DIR; messages are mirrored to stderr.
    """

    def __init__(self, log_dir=LOGS_DIR, level=LOG_LEVEL, name="tweet_saver"):
        self.log_dir = log_dir
        os.makedirs(self.log_dir, exist_ok=True)
        started = datetime.now().strftime('%Y-%m-%d_%H-%M-%S')
        self.log_file = os.path.join(self.log_dir, f"{name}_{started}.log")

        formatter = logging.Formatter(LOG_FORMAT)
        file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
        file_handler.setFormatter(formatter)
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)

        self._logger = logging.getLogger(name)
        self._logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
        self._logger.addHandler(file_handler)
        self._logger.addHandler(stream_handler)

    def log(self, message):
        self._logger.info(message)

    def error(self, message, *args, **kwargs):
        self._logger.error(message, *args, **kwargs)

    def warn(self, message):
        self._logger.warning(f"⚠️ {message}")

    def debug(self, message):
        self._logger.debug(message)

    def success(self, message):
        self._logger.info(f"✅ {message}")

    def summary(self, title, counts):
        """
        One line per cycle, e.g. "Poll complete: 2 appended, 0 updated".
        """
        parts = ", ".join(f"{count} {label}" for label, count in counts.items())
        self._logger.info(f"{title}: {parts}")

logger = Logger()

def setup_logger():
    return logger
