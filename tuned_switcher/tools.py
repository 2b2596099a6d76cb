import logging
from logging.handlers import RotatingFileHandler
import os
import sys

from tuned_switcher.globals import LOG_DIR, LOG_FILE


class ConditionalFormatter(logging.Formatter):
    """Log file format; ERROR and CRITICAL records also carry their source location."""

    DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
    ERROR_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s %(filename)s:%(lineno)d] %(message)s"
    DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

    def __init__(self) -> None:
        super().__init__(fmt=self.DEFAULT_FORMAT, datefmt=self.DATE_FORMAT)
        self._error_formatter = logging.Formatter(fmt=self.ERROR_FORMAT, datefmt=self.DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.ERROR: return self._error_formatter.format(record)
        return super().format(record)


def create_log_dir() -> bool:
    try:
        os.makedirs(LOG_DIR, exist_ok=True)
        return True
    except OSError:
        return False


def setup_logger(debug: bool = False, log_file: bool = True) -> None:
    """
    Set up logging for the command line tool and the tray.

    Warnings and errors always go to stderr; with log_file the full log is
    also kept in a rotating file under $XDG_STATE_HOME.

    :param debug: log DEBUG records instead of starting at INFO
    :param log_file: also write to the rotating log file when its directory is usable
    """
    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(logging.Formatter("[%(levelname)s] [%(module)s] %(message)s"))
    stream_handler.setLevel(logging.DEBUG if debug else logging.WARNING)
    handlers = [stream_handler]

    if log_file and create_log_dir():
        file_handler = RotatingFileHandler(
            LOG_FILE,
            maxBytes=10*1024*1024, # 10MB
            backupCount=1,
            encoding="utf-8"
        )
        file_handler.setFormatter(ConditionalFormatter())
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        handlers=handlers,
        force=True,
    )
