"""Logging setup for the command-line entry point."""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "csv_converter"


def setup_logging(verbose: bool = False) -> logging.Logger:
    """
    Stderr logging for the package; stdout is reserved for CSV output.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(LOGGER_NAME)

    # Rebind to the current stderr on repeated invocations in one process
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    logger.setLevel(level)
    logger.propagate = False

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)-8s %(threadName)s %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    return logger
