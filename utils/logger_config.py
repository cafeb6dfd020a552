"""
Logging setup shared by the viewer modules.

All loggers hang below the 'phase_cloud_viewer' logger, which owns the
handlers: a stdout stream handler by default and an optional log file
requested on the command line.
"""

import inspect
import logging
import sys
from typing import List, Optional
from pathlib import Path


class LoggerConfig:
    """Owns the handler setup of the 'phase_cloud_viewer' logger tree."""

    _configured = False
    _root_logger_name = 'phase_cloud_viewer'
    _format_string = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    @classmethod
    def setup_root_logger(
        cls,
        level: int = logging.INFO,
        format_string: Optional[str] = None,
        log_file: Optional[Path] = None
    ) -> logging.Logger:
        """
        Attach the console (and optionally file) handler once.

        Args:
            level: Level for the logger and its handlers
            format_string: Replaces the default record format
            log_file: Also write records to this file

        Returns:
            logging.Logger: The viewer's top-level logger
        """
        root_logger = logging.getLogger(cls._root_logger_name)
        if cls._configured:
            return root_logger

        root_logger.setLevel(level)
        root_logger.handlers.clear()
        if format_string is not None:
            cls._format_string = format_string

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(cls._format_string))
        root_logger.addHandler(console_handler)

        if log_file is not None:
            cls._attach_file_handler(root_logger, Path(log_file), level)

        # records stop here instead of reaching the global root logger
        root_logger.propagate = False

        cls._configured = True
        return root_logger

    @classmethod
    def add_file_handler(cls, log_file: Path) -> None:
        """Copy every later record into log_file as well."""
        root_logger = cls.setup_root_logger()
        cls._attach_file_handler(root_logger, Path(log_file), root_logger.level)
        root_logger.info(f"Logging to file: {log_file}")

    @classmethod
    def _attach_file_handler(cls, root_logger: logging.Logger, log_file: Path, level: int) -> None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(cls._format_string))
        root_logger.addHandler(file_handler)

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if not cls._configured:
            cls.setup_root_logger()
        return logging.getLogger(f"{cls._root_logger_name}.{name}")

    @classmethod
    def set_level(cls, level: int) -> None:
        """Apply level to the top-level logger and every handler on it."""
        root_logger = logging.getLogger(cls._root_logger_name)
        root_logger.setLevel(level)
        for handler in root_logger.handlers:
            handler.setLevel(level)
        root_logger.debug(f"Log level set to {logging.getLevelName(level)}")


def get_logger(name: str = None) -> logging.Logger:
    """
    Logger for a viewer module.

    Args:
        name: Dotted module name, the caller's __name__ when omitted

    Returns:
        logging.Logger: Child of the 'phase_cloud_viewer' logger
    """
    if name is None:
        caller = inspect.currentframe().f_back
        name = caller.f_globals.get('__name__', 'unknown')
    return LoggerConfig.get_logger(name)


LoggerConfig.setup_root_logger()
