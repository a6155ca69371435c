"""Logging configuration for the DB2 health checks.

Plugins own stdout for the status line, so diagnostics always go to
stderr.  ``-v`` raises the stderr level; ``-T`` appends a DEBUG trace of
the whole run to a file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-36s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_PACKAGE_LOGGER = "db2_health"


def level_for_verbosity(verbose: int) -> int:
    """Map the number of ``-v`` flags to a stderr log level."""
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(verbose: int = 0, trace_file: Path | None = None) -> logging.Logger:
    """Configure the package logger and return it.

    Handlers installed by a previous call are replaced, so repeated
    invocations in one process (tests, the CLI called twice) do not
    duplicate output.
    """
    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setLevel(level_for_verbosity(verbose))
    stderr_handler.setFormatter(formatter)
    package_logger.addHandler(stderr_handler)

    if trace_file is not None:
        trace_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(trace_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)
        package_logger.setLevel(logging.DEBUG)
    else:
        package_logger.setLevel(level_for_verbosity(verbose))

    return package_logger
