"""
Logging setup; everything logs through structlog.
"""

import logging
import sys

import structlog


def setup_logging(level: str = "WARNING"):
    """
    Only show events at ``level`` and above, and write them to stderr so
    they do not get mixed up with tables printed to stdout.
    """

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    return
