"""Logging configuration for the eventpass command line."""

import logging
import os
import sys

LOGGER_NAME = "eventpass"
LOG_LEVEL_ENV_VAR = "EVENTPASS_LOG_LEVEL"


def _resolve_level(verbose: bool) -> int:
    if verbose:
        return logging.DEBUG

    candidate = os.getenv(LOG_LEVEL_ENV_VAR, "WARNING").upper()
    numeric_level = logging.getLevelName(candidate)
    if isinstance(numeric_level, int):
        return numeric_level

    print(
        f"[!] Unknown log level '{candidate}', defaulting to WARNING",
        file=sys.stderr,
    )
    return logging.WARNING


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a single stderr handler to the package logger."""
    logger = logging.getLogger(LOGGER_NAME)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter("[%(levelname)s] %(name)s: %(message)s")
    )
    logger.addHandler(handler)
    logger.setLevel(_resolve_level(verbose))
    logger.propagate = False
    return logger
