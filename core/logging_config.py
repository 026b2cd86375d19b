"""
Logging configuration for the denoising comparison project.

Console output is always available; a rotating log file is added only when
a log directory is given, so a default run writes nothing to disk.
"""

import copy
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Dict, Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",  # Reset
    }

    def format(self, record):
        # Other handlers share the record, so color a copy
        if record.levelname in self.COLORS:
            record = copy.copy(record)
            record.levelname = (
                f"{self.COLORS[record.levelname]}{record.levelname}"
                f"{self.COLORS['RESET']}"
            )

        return super().format(record)


class LoggingManager:
    """
    Centralized logging management for the project.
    """

    def __init__(self):
        self.loggers: Dict[str, logging.Logger] = {}
        self.handlers: Dict[str, logging.Handler] = {}
        self.configured = False

    def setup_logging(
        self,
        level: Union[str, int] = "INFO",
        log_dir: Optional[Union[str, Path]] = None,
        console_output: bool = True,
        colored: bool = True,
        max_file_size: int = 10 * 1024 * 1024,  # 10MB
        backup_count: int = 5,
    ) -> logging.Logger:
        """
        Set up the logging configuration.

        Args:
            level: Logging level
            log_dir: Directory for the log file (no file logging if None)
            console_output: Whether to output to console
            colored: Whether console output uses ANSI colors
            max_file_size: Maximum size for log files before rotation
            backup_count: Number of backup files to keep

        Returns:
            Main project logger
        """
        # Convert string level to int
        if isinstance(level, str):
            level = getattr(logging, level.upper())

        # Clear existing handlers
        root_logger = logging.getLogger()
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
        self.handlers.clear()

        root_logger.setLevel(level)

        if console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            if colored and sys.stdout.isatty():
                console_handler.setFormatter(ColoredFormatter(LOG_FORMAT))
            else:
                console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root_logger.addHandler(console_handler)
            self.handlers["console"] = console_handler

        if log_dir is not None:
            log_dir = Path(log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                log_dir / "denoise_comparison.log",
                maxBytes=max_file_size,
                backupCount=backup_count,
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
            root_logger.addHandler(file_handler)
            self.handlers["main_file"] = file_handler

        # Matplotlib and PIL are chatty at DEBUG level
        for noisy_logger in ("matplotlib", "PIL"):
            logging.getLogger(noisy_logger).setLevel(max(level, logging.INFO))

        main_logger = logging.getLogger("denoise_comparison")
        self.loggers["main"] = main_logger

        self.configured = True
        main_logger.debug("Logging system initialized")

        return main_logger

    def get_logger(self, name: str) -> logging.Logger:
        """Get or create a logger with the given name."""
        if name not in self.loggers:
            self.loggers[name] = logging.getLogger(name)
        return self.loggers[name]

    def set_level(self, level: Union[str, int]):
        """Set logging level for all managed loggers and handlers."""
        if isinstance(level, str):
            level = getattr(logging, level.upper())

        logging.getLogger().setLevel(level)
        for logger in self.loggers.values():
            logger.setLevel(level)
        for handler in self.handlers.values():
            handler.setLevel(level)

    def shutdown(self):
        """Close and detach all handlers installed by this manager."""
        root_logger = logging.getLogger()
        for handler in self.handlers.values():
            root_logger.removeHandler(handler)
            handler.close()

        self.handlers.clear()
        self.configured = False


logging_manager = LoggingManager()


def setup_project_logging(
    level: str = "INFO",
    log_dir: Optional[str] = None,
    console: bool = True,
    colored: bool = True,
) -> logging.Logger:
    """
    Convenience function to set up project logging.

    Args:
        level: Logging level
        log_dir: Directory for log files
        console: Enable console output
        colored: Use colored console output when attached to a terminal

    Returns:
        Main project logger
    """
    return logging_manager.setup_logging(
        level=level,
        log_dir=log_dir,
        console_output=console,
        colored=colored,
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging_manager.get_logger(name)
