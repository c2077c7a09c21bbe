"""Logging configuration for the layouts CLI.

Provides:
- Configurable log levels (WARNING, INFO with --verbose, DEBUG with --debug)
- Colored level names on terminals
- Subprocess call logging for ``hs`` / ``osascript`` / ``defaults``
- Operation timing logs
"""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Any


LOGGER_NAME = "macos_layouts"

DEFAULT_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEBUG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d: %(message)s"


class ColoredFormatter(logging.Formatter):
    """Colored log formatter for terminal output."""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        """Format log record with a colored level name."""
        original = record.levelname
        if original in self.COLORS:
            record.levelname = f"{self.COLORS[original]}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(verbose: bool = False, debug: bool = False) -> logging.Logger:
    """Configure the ``macos_layouts`` logger hierarchy.

    Args:
        verbose: Enable verbose logging (INFO level)
        debug: Enable debug logging (DEBUG level)

    Returns:
        Configured package logger

    Examples:
        >>> logger = setup_logging(verbose=True)
        >>> logger.info("Resolving display roles")
        2026-01-12 10:30:45 [INFO] macos_layouts: Resolving display roles
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Repeated invocations (tests, CliRunner) must not stack handlers
    logger.handlers.clear()
    logger.propagate = False

    if debug:
        logger.setLevel(logging.DEBUG)
        log_format = DEBUG_FORMAT
    elif verbose:
        logger.setLevel(logging.INFO)
        log_format = VERBOSE_FORMAT
    else:
        logger.setLevel(logging.WARNING)
        log_format = DEFAULT_FORMAT

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(logger.level)

    if sys.stderr.isatty():
        formatter = ColoredFormatter(log_format)
    else:
        formatter = logging.Formatter(log_format)

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


def log_subprocess_call(cmd: list, result: Any, logger: logging.Logger) -> None:
    """Log a subprocess call and its result at DEBUG.

    The Lua payload of ``hs -c`` is elided to its first line.

    Args:
        cmd: Command list
        result: subprocess.CompletedProcess result
        logger: Logger instance
    """
    shown = [arg.splitlines()[0] + " ..." if "\n" in arg else arg for arg in cmd]
    logger.debug(f"Subprocess call: {' '.join(shown)}")
    logger.debug(f"  Return code: {result.returncode}")

    if getattr(result, 'stdout', None):
        stdout = result.stdout if isinstance(result.stdout, str) else result.stdout.decode()
        logger.debug(f"  stdout: {stdout[:200]}")

    if getattr(result, 'stderr', None):
        stderr = result.stderr if isinstance(result.stderr, str) else result.stderr.decode()
        logger.debug(f"  stderr: {stderr[:200]}")


@contextmanager
def log_timing(operation: str, logger: logging.Logger):
    """Context manager for logging operation timing.

    Examples:
        >>> with log_timing("Snapshot", logger):
        ...     client.dump()
        INFO: Snapshot completed in 215.32ms
    """
    start = time.perf_counter()
    logger.debug(f"Starting: {operation}")

    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{operation} completed in {elapsed_ms:.2f}ms")
