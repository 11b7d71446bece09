import logging
import sys


LOGGER_NAME = "note_indexer"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def level_for_verbosity(verbosity: int) -> int:
    if verbosity >= 2:
        return logging.DEBUG
    if verbosity == 1:
        return logging.INFO
    return logging.WARNING


def setup_logging(verbosity: int = 0) -> logging.Logger:
    """
    Configure package-wide logging on stderr.

    stdout is reserved for the rendered index. Calling this again replaces
    the handler instead of stacking a second one.
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = level_for_verbosity(verbosity)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    logger.debug("Logging initialized. level=%s", logging.getLevelName(level))
    return logger
