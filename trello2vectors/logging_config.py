"""Logging setup for trello2vectors runs."""

from __future__ import annotations

import logging
import sys

PACKAGE_LOGGER = "trello2vectors"

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
# The board fetch runs on worker threads, so file records name the thread
FILE_FORMAT = "%(asctime)s [%(threadName)s] %(name)s %(levelname)s: %(message)s"


def _reset(logger: logging.Logger, level: int, handlers: list[logging.Handler]) -> None:
    logger.setLevel(level)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.propagate = False


def setup_logging(level: str = "INFO", log_file: str | None = None) -> logging.Logger:
    """Route trello2vectors logs to stderr and, optionally, a file.

    Unknown level names fall back to INFO. At DEBUG the ``urllib3``
    connection log (every Trello and Supabase request) is sent to the same
    handlers; otherwise only its warnings are.

    Returns:
        The ``trello2vectors`` logger
    """
    resolved = LEVELS.get(level.upper(), logging.INFO)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handlers: list[logging.Handler] = [console]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(file_handler)

    logger = logging.getLogger(PACKAGE_LOGGER)
    _reset(logger, resolved, handlers)
    _reset(
        logging.getLogger("urllib3"),
        logging.DEBUG if resolved == logging.DEBUG else logging.WARNING,
        handlers,
    )
    return logger
