"""Logging configuration for flowgen.

Modules log through ``get_logger(__name__)`` so every record lands under the
``flowgen`` namespace. The CLI picks the level once per run; parsed values
are reported at INFO and directive counts at DEBUG.
"""

import logging
import sys

PACKAGE_LOGGER = "flowgen"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a flowgen module.

    Args:
        name: Logger name, typically __name__ from calling module.
    """
    return logging.getLogger(name)


def level_for(verbose: bool) -> int:
    """Map the CLI verbosity flag to a logging level."""
    return logging.DEBUG if verbose else logging.INFO


def set_global_log_level(level: int) -> None:
    """Route all records to stderr and set the level of the flowgen loggers.

    Args:
        level: Logging level (e.g., logging.DEBUG, logging.INFO).
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(level)
