#!/usr/bin/env python3
"""
Attendance engine bootstrap: logging setup, configuration loading and
recorder creation for a host application.

---
ShiftClock - An open-source attendance tracking engine

Author: Bastian Cerf
Copyright (C) 2025 Mecacerf SA
License: AGPL-3.0 <https://www.gnu.org/licenses/>
"""

# Standard libraries
import logging, logging.handlers
from pathlib import Path
from typing import Optional, TextIO

# Internal libraries
from .local_config import LocalConfig
from .core.store import AttendanceStore
from .core.recorder import AttendanceRecorder

logger = logging.getLogger(__name__)

# Logging configuration
LOGGING_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class ColorFormatter(logging.Formatter):
    """
    Log formatter that colors only the log level name.
    """

    COLORS = {
        "DEBUG": "\033[94m",  # Blue
        "INFO": "\033[92m",  # Green
        "WARNING": "\033[93m",  # Yellow
        "ERROR": "\033[91m",  # Red
        "CRITICAL": "\033[41m",  # White on Red
        "RESET": "\033[0m",  # Reset color
    }

    def __init__(self):
        super().__init__(LOGGING_FORMAT)

    def format(self, record: logging.LogRecord):
        # Work on a copy, the record is shared with the other handlers
        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        record.levelname = f"{color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def configure_logging(config: Optional[LocalConfig] = None):
    """
    Configure the logging module from the `[logging]` section.

    Logs are printed in the standard error stream and, if a file is
    configured, saved with a time rotating strategy: a new file is
    created at midnight and the configured number of files is kept.

    Args:
        config (Optional[LocalConfig]): Configuration, `None` to log
            everything to the console only.
    """
    level = "DEBUG"
    filename = None
    backup_days = 7
    color = True

    if config is not None:
        log_conf = config.section("logging")
        level = log_conf["level"]
        filename = log_conf["file"]
        backup_days = log_conf["backup_days"]
        color = log_conf["color"]

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(
        ColorFormatter() if color else logging.Formatter(LOGGING_FORMAT)
    )

    handlers: list[logging.Handler] = [console_handler]
    if filename:
        file_handler = logging.handlers.TimedRotatingFileHandler(
            filename=filename,
            when="midnight",
            interval=1,
            backupCount=backup_days,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(LOGGING_FORMAT))
        handlers.insert(0, file_handler)

    # Configure logging once for all modules
    logging.basicConfig(level=level, handlers=handlers, force=True)


def load_config(path: Optional[str | Path | TextIO] = None, name: Optional[str] = None) -> LocalConfig:
    """
    Parse and validate the local configuration, then log it.

    Returns:
        LocalConfig: Local configuration handle.

    Raises:
        ConfigError: Invalid configuration.
    """
    config = LocalConfig(path, name=name)
    config.show_config()
    return config


def engine_bootstrap(
    store: AttendanceStore,
    shift_id: str,
    config_path: Optional[str | Path | TextIO] = None,
    config_name: Optional[str] = None,
) -> AttendanceRecorder:
    """
    Standard engine bootstrap. Load the configuration, set up the logging
    module and create the recorder of the active shift, working in the
    configured timezone.

    Args:
        store (AttendanceStore): Store provided by the host.
        shift_id (str): Identifier of the active shift.
        config_path (Optional[str | Path | TextIO]): Configuration file,
            the default one if `None`.
        config_name (Optional[str]): Configuration name, required for a
            file-like.

    Returns:
        AttendanceRecorder: The configured recorder.

    Raises:
        ConfigError: Invalid configuration.
        MissingShiftError: The shift doesn't exist.
        StoreException: The store failed.
    """
    config = LocalConfig(config_path, name=config_name)
    configure_logging(config)
    logger.info("... ShiftClock engine startup ...")
    config.show_config()

    recorder = AttendanceRecorder(store, shift_id, config.rules(), config.tzinfo())
    logger.info(f"Recording attendance for {recorder.shift!s} in {store!s}.")
    return recorder
