"""Logging setup for textlearn.

Three rotating files live under ``<root_dir>/logs``: ``textlearn.log`` with
everything at INFO and above, ``training.log`` with the optimisers' epoch
and convergence records only, and the optional ``debug.log``. Console
output carries a level symbol and, for records emitted by optimiser worker
threads, the name of the thread.
"""

from __future__ import annotations

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import ConfigError, LoggingConfig

FILE_FORMAT = "%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s"
MAIN_LOG_NAME = "textlearn.log"
TRAINING_LOG_NAME = "training.log"
DEBUG_LOG_NAME = "debug.log"
TRAINING_LOGGER = "textlearn.optimization"
LOG_FILE_BYTES = 5_000_000
LOG_FILE_BACKUPS = 5
LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class ConsoleFormatter(logging.Formatter):
    """Level symbol, optional colour, and the worker thread for pool records."""

    SYMBOLS: dict[int, tuple[str, str]] = {
        logging.DEBUG: ("D", "\x1b[36m"),
        logging.INFO: ("I", "\x1b[32m"),
        logging.WARNING: ("!", "\x1b[33m"),
        logging.ERROR: ("X", "\x1b[31m"),
        logging.CRITICAL: ("X", "\x1b[35m"),
    }
    RESET = "\x1b[0m"

    def __init__(self, use_color: bool) -> None:
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        symbol, color = self.SYMBOLS.get(record.levelno, ("?", "\x1b[37m"))
        message = super().format(record)
        if record.threadName and record.threadName != threading.main_thread().name:
            message = f"[{record.threadName}] {message}"
        if self.use_color:
            symbol = f"{color}{symbol}{self.RESET}"
        return f"{symbol} {message}"


def configure_logging(logging_config: LoggingConfig, root_dir: Path) -> Path:
    """Install file and console handlers on the root logger; return the log directory."""

    level = level_from_string(logging_config.level)
    log_dir = (root_dir / "logs").expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)

    training = _file_handler(log_dir / TRAINING_LOG_NAME, logging.INFO)
    training.addFilter(logging.Filter(TRAINING_LOGGER))
    handlers: list[logging.Handler] = [
        _file_handler(log_dir / MAIN_LOG_NAME, logging.INFO),
        training,
        _console_handler(),
    ]
    if logging_config.debug_file:
        handlers.append(_file_handler(log_dir / DEBUG_LOG_NAME, logging.DEBUG))

    logging.basicConfig(level=level, handlers=handlers, force=True)
    return log_dir


def level_from_string(level: str) -> int:
    try:
        return LEVELS[level.strip().upper()]
    except KeyError as exc:
        raise ConfigError(f"Unknown log level: {level}") from exc


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = RotatingFileHandler(
        path, maxBytes=LOG_FILE_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logging.DEBUG)
    use_color = bool(getattr(handler.stream, "isatty", lambda: False)())
    handler.setFormatter(ConsoleFormatter(use_color))
    return handler


__all__ = ["ConsoleFormatter", "configure_logging", "level_from_string"]
