"""structlog setup for ssh-key-only."""

import logging
import sys
from typing import Optional, TextIO

import structlog

from ssh_key_only.config import LoggingConfig


def configure_logging(
    config: LoggingConfig, verbose: bool = False, quiet: bool = False
) -> Optional[TextIO]:
    """Configure structlog once for the process.

    Returns:
        The opened log file, if one was configured
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = getattr(logging, config.level.upper(), logging.INFO)

    stream: TextIO = sys.stdout
    log_file: Optional[TextIO] = None
    if config.file is not None:
        log_file = open(config.file, "a", encoding="utf-8")
        stream = log_file

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=log_file is None and stream.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=False,
    )
    return log_file
