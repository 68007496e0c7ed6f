"""
Logging configuration for filemover.

One ``filemover`` logger writing the same lines to the console and to a
month-stamped log file (``log.txt`` becomes ``log202610.txt``). A new file is
started each month, and within a month the file rolls over by size.
"""

import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path

LOGGER_NAME = "filemover"
DEFAULT_LOG_FILE = "log.txt"
DEFAULT_MAX_BYTES = 1024 * 1024 * 1024  # 1GB
DEFAULT_BACKUP_COUNT = 31
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


class MonthlyRotatingFileHandler(logging.handlers.RotatingFileHandler):
    """
    Size-rotating file handler whose file name carries the current month.

    Parameters
    ----------
    filename : str | Path
        Base log file name, the month is inserted before the suffix
    max_bytes : int, default=DEFAULT_MAX_BYTES
        Roll over to a numbered backup once the file reaches this size
    backup_count : int, default=DEFAULT_BACKUP_COUNT
        Number of numbered backups kept per month
    """

    def __init__(
        self,
        filename: str | Path,
        max_bytes: int = DEFAULT_MAX_BYTES,
        backup_count: int = DEFAULT_BACKUP_COUNT,
        encoding: str = "utf-8",
    ):
        self.base_path = Path(filename)
        self.current_month = self._month_stamp()
        super().__init__(
            self._path_for(self.current_month),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding=encoding,
            delay=True,
        )

    def _month_stamp(self) -> str:
        return datetime.now().strftime("%Y%m")

    def _path_for(self, month: str) -> str:
        return str(
            self.base_path.with_name(
                f"{self.base_path.stem}{month}{self.base_path.suffix}"
            )
        )

    def shouldRollover(self, record: logging.LogRecord) -> bool:
        if self._month_stamp() != self.current_month:
            return True
        return bool(super().shouldRollover(record))

    def doRollover(self) -> None:
        month = self._month_stamp()
        if month == self.current_month:
            super().doRollover()
            return

        # New month: switch files, the stream is reopened on the next emit
        if self.stream:
            self.stream.close()
            self.stream = None
        self.current_month = month
        self.baseFilename = str(Path(self._path_for(month)).absolute())


def setup_logging(
    verbose: bool = False, log_file: str | Path = DEFAULT_LOG_FILE
) -> logging.Logger:
    """
    Configure the filemover logger: console + monthly rolling file.

    Calling it again replaces the handlers from the previous call.

    Parameters
    ----------
    verbose : bool, default=False
        Log DEBUG messages as well
    log_file : str | Path, default=DEFAULT_LOG_FILE
        Base name of the log file

    Returns
    -------
    logging.Logger
        The configured logger, to be passed to TransferEngine
    """
    logger = logging.getLogger(LOGGER_NAME)
    shutdown_logging(logger)

    log_level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(log_level)
    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)

    file_handler = MonthlyRotatingFileHandler(log_file)
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)
    return logger


def shutdown_logging(logger: logging.Logger) -> None:
    """Flush, close and detach all handlers of ``logger``."""
    for handler in list(logger.handlers):
        handler.flush()
        handler.close()
        logger.removeHandler(handler)
