"""
Logging infrastructure for the hmm_graph engine.

Provides centralized logging configuration with console and file output.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from .config import get_config

ROOT_LOGGER_NAME = 'hmm_graph'


class HMMGraphLogger:
    """Centralized logger for the hmm_graph package."""

    def __init__(self):
        self._loggers = {}
        self._console_handler: Optional[logging.StreamHandler] = None
        self._file_handler: Optional[logging.FileHandler] = None
        self._setup_root_logger()

    def _setup_root_logger(self):
        """Configure the package root logger with settings from config."""
        log_level = get_config('logging', 'level') or 'INFO'
        log_format = get_config('logging', 'format')
        file_logging = get_config('logging', 'file_logging') or False
        log_file = get_config('logging', 'log_file') or 'hmm_graph.log'

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.setLevel(getattr(logging, log_level.upper()))
        root_logger.handlers.clear()

        formatter = logging.Formatter(log_format)

        # Diagnostics go to stderr so command output on stdout stays clean
        self._console_handler = logging.StreamHandler(sys.stderr)
        self._console_handler.setLevel(getattr(logging, log_level.upper()))
        self._console_handler.setFormatter(formatter)
        root_logger.addHandler(self._console_handler)

        if file_logging:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)

            self._file_handler = logging.FileHandler(log_path)
            self._file_handler.setLevel(getattr(logging, log_level.upper()))
            self._file_handler.setFormatter(formatter)
            root_logger.addHandler(self._file_handler)

        root_logger.propagate = False

    def get_logger(self, name: str) -> logging.Logger:
        """Get or create a logger with the specified name."""
        if name.startswith(ROOT_LOGGER_NAME):
            full_name = name
        else:
            full_name = f'{ROOT_LOGGER_NAME}.{name}'

        if full_name not in self._loggers:
            self._loggers[full_name] = logging.getLogger(full_name)

        return self._loggers[full_name]

    def set_level(self, level: str):
        """Set logging level of the package logger and its own handlers."""
        log_level = getattr(logging, level.upper())

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.setLevel(log_level)

        for handler in (self._console_handler, self._file_handler):
            if handler is not None:
                handler.setLevel(log_level)

    def enable_file_logging(self, log_file: Optional[str] = None):
        """Enable file logging with optional custom log file path."""
        if self._file_handler is not None:
            return

        if log_file is None:
            log_file = get_config('logging', 'log_file') or 'hmm_graph.log'

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)

        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        self._file_handler = logging.FileHandler(log_path)
        self._file_handler.setLevel(root_logger.level)
        self._file_handler.setFormatter(logging.Formatter(get_config('logging', 'format')))
        root_logger.addHandler(self._file_handler)

    def disable_file_logging(self):
        """Detach and close the file handler added by this manager."""
        if self._file_handler is None:
            return

        logging.getLogger(ROOT_LOGGER_NAME).removeHandler(self._file_handler)
        self._file_handler.close()
        self._file_handler = None


# Global logger manager instance
_logger_manager = HMMGraphLogger()


def get_logger(name: str = 'main') -> logging.Logger:
    """Get a logger instance for the specified module/component."""
    return _logger_manager.get_logger(name)


def set_log_level(level: str):
    """Set global logging level."""
    _logger_manager.set_level(level)


def enable_file_logging(log_file: Optional[str] = None):
    """Enable file logging globally."""
    _logger_manager.enable_file_logging(log_file)


def disable_file_logging():
    """Disable file logging globally."""
    _logger_manager.disable_file_logging()


def get_graph_logger() -> logging.Logger:
    """Get logger for graph construction components."""
    return get_logger('graph')


def get_inference_logger() -> logging.Logger:
    """Get logger for inference components."""
    return get_logger('inference')


def get_sampling_logger() -> logging.Logger:
    """Get logger for stochastic generation."""
    return get_logger('sampling')
