"""
Logging utilities for pangloss.

Library modules log through ``logging.getLogger(__name__)`` and never
configure handlers themselves. Applications (and the ``pangloss`` CLI) call
:func:`setup_logging` once.

Example:
    >>> from pangloss.utils import setup_logging
    >>>
    >>> logger = setup_logging('pangloss', level=logging.DEBUG)
    >>> logger.info('Optimizer ready')
"""

import os
import sys
import logging
from datetime import datetime
from typing import Optional


# ============================================================================
# CONSOLE LOGGING
# ============================================================================

class ColoredFormatter(logging.Formatter):
    """
    Colored console formatter.

    Adds colors to log levels for better readability.
    """

    # ANSI color codes
    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        # Color a copy; the record is shared with the other handlers
        record = logging.makeLogRecord(record.__dict__)
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"

        return super().format(record)


def setup_logging(
    name: str = 'pangloss',
    log_dir: Optional[str] = None,
    level: int = logging.INFO,
    console: bool = True,
    file: bool = True,
    colored: bool = True
) -> logging.Logger:
    """
    Setup logging configuration.

    Configuring the ``'pangloss'`` logger covers every module in the package,
    since their loggers are named after the module path.

    Args:
        name: Logger name
        log_dir: Directory for log files
        level: Logging level
        console: Enable console logging
        file: Enable file logging (needs ``log_dir``)
        colored: Use colored console output

    Returns:
        Configured logger

    Example:
        >>> logger = setup_logging('pangloss', log_dir='logs')
        >>> logger.info('Training started')
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Remove existing handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    fmt = '%(asctime)s | %(levelname)-8s | %(name)s | %(message)s'
    datefmt = '%Y-%m-%d %H:%M:%S'

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        if colored:
            console_formatter = ColoredFormatter(fmt, datefmt=datefmt)
        else:
            console_formatter = logging.Formatter(fmt, datefmt=datefmt)

        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    if file and log_dir:
        os.makedirs(log_dir, exist_ok=True)

        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        log_file = os.path.join(log_dir, f'{name}_{timestamp}.log')

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
        logger.addHandler(file_handler)

        logger.info(f"Logging to file: {log_file}")

    return logger
