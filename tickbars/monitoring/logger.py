"""Structured logging for tickbars."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO, Union


LOG_FORMAT = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

ROOT_LOGGER_NAME = "tickbars"


class BarsLogger:
    """
    Structured logger with keyword argument support.

    logger.info("Sampling dollar bars", out_file=path) renders as
    "Sampling dollar bars | out_file=bars/ES/dollar-....csv".
    """

    def __init__(self, name: str):
        """
        Initialize bars logger.

        Args:
            name: Logger name (typically __name__)
        """
        self.logger = logging.getLogger(name)

    def _format_message(self, msg: str, **kwargs) -> str:
        """Format message with keyword arguments."""
        if kwargs:
            extra = ' | '.join(f'{k}={v}' for k, v in kwargs.items())
            return f"{msg} | {extra}"
        return msg

    def debug(self, msg: str, **kwargs) -> None:
        """Log debug message."""
        self.logger.debug(self._format_message(msg, **kwargs))

    def info(self, msg: str, **kwargs) -> None:
        """Log info message."""
        self.logger.info(self._format_message(msg, **kwargs))

    def warning(self, msg: str, **kwargs) -> None:
        """Log warning message."""
        self.logger.warning(self._format_message(msg, **kwargs))

    def error(self, msg: str, exc_info: bool = False, **kwargs) -> None:
        """Log error message."""
        self.logger.error(self._format_message(msg, **kwargs), exc_info=exc_info)

    def critical(self, msg: str, **kwargs) -> None:
        """Log critical message."""
        self.logger.critical(self._format_message(msg, **kwargs))


def setup_logger(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure handlers on the package root logger.

    Installs a console handler and, when log_file is given, a rotating file
    handler. Calling it again replaces the handlers installed before.

    Args:
        level: Logging level (name or number)
        log_file: Optional path of a rotating log file
        stream: Console stream, stdout by default

    Returns:
        The configured package root logger
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    # Console Handler
    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    # File Handler
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10*1024*1024, # 10MB
            backupCount=5
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root


_loggers = {}


def get_logger(name: str) -> BarsLogger:
    """
    Get or create a bars logger.

    Args:
        name: Logger name (typically __name__)

    Returns:
        BarsLogger instance
    """
    if name not in _loggers:
        _loggers[name] = BarsLogger(name)
    return _loggers[name]
