"""
Logging utilities for the hours tracker.

All modules log through the "hours_tracker" logger (or a child of it).
Parsers log heuristic decisions at DEBUG and dropped input at WARNING;
the CLI decides where the output goes.
"""

import logging
import sys
from typing import Optional, TextIO

LOGGER_NAME = 'hours_tracker'


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors the level name for terminal output.
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"
            )
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def setup_logging(
    verbose: bool = False,
    use_colors: bool = True,
    stream: Optional[TextIO] = None
) -> logging.Logger:
    """
    Configure the application logger.

    Args:
        verbose: DEBUG level if True, INFO otherwise
        use_colors: Color level names when the stream is a terminal
        stream: Output stream (defaults to stderr so exports to stdout stay clean)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    logger.handlers.clear()

    stream = stream if stream is not None else sys.stderr
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)

    fmt = '%(levelname)-8s | %(message)s'
    if use_colors and hasattr(stream, 'isatty') and stream.isatty():
        handler.setFormatter(ColoredFormatter(fmt=fmt))
    else:
        handler.setFormatter(logging.Formatter(fmt=fmt))

    logger.addHandler(handler)
    logger.propagate = False
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get the application logger or one of its children.

    Args:
        name: Child name (e.g., "legacy_parser"); None for the root app logger
    """
    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)


def log_section(title: str, logger: Optional[logging.Logger] = None):
    """Log a section banner."""
    logger = logger or get_logger()
    logger.info("=" * 60)
    logger.info(f"  {title}")
    logger.info("=" * 60)


def log_step(step: str, logger: Optional[logging.Logger] = None):
    logger = logger or get_logger()
    logger.info(f"→ {step}")


def log_error(error: str, logger: Optional[logging.Logger] = None):
    logger = logger or get_logger()
    logger.error(f"✗ {error}")


def log_success(message: str, logger: Optional[logging.Logger] = None):
    logger = logger or get_logger()
    logger.info(f"✓ {message}")


def log_warning(warning: str, logger: Optional[logging.Logger] = None):
    logger = logger or get_logger()
    logger.warning(f"⚠ {warning}")
