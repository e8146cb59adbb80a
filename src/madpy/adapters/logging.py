"""Standard library logging setup for the madpy process.

Importing madpy never configures logging. The command line entry point
calls configure_logging() and log_version() explicitly at startup.
"""

import logging
import platform
import sys

from madpy import __version__

LOGGER_NAME = "madpy"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Level names accepted on the command line
VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(
    level: str | int = "INFO",
    stream=None,
    fmt: str = DEFAULT_FORMAT,
) -> logging.Handler:
    """Attach a stream handler to the madpy logger.

    Args:
        level: Level name or number for the madpy logger.
        stream: Output stream, defaults to stderr.
        fmt: Record format string.

    Returns:
        The installed handler, so callers can remove it again.
    """
    if isinstance(level, str):
        level = level.upper()
        if level not in VALID_LEVELS:
            raise ValueError(f"unknown log level {level!r}")
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    root = logging.getLogger(LOGGER_NAME)
    root.addHandler(handler)
    root.setLevel(level)
    return handler


def version_banner(program: str = "metrics-anomaly-detector") -> str:
    """Return a one-line version description of the running program."""
    return (
        f"{program}, version {__version__} "
        f"(python {platform.python_version()}, {platform.system().lower()})"
    )


def log_version(logger: logging.Logger | None = None) -> str:
    """Log the version banner at INFO level and return it."""
    banner = version_banner()
    (logger or logging.getLogger(LOGGER_NAME)).info(banner)
    return banner
