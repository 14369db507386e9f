"""Logger lookup for the upload pipeline."""

import logging


def get_logger(name: str) -> logging.Logger:
    """Return the logger for one pipeline area, e.g. 'loguploader.request'.

    Records propagate to the root logger, so an application's own
    logging.basicConfig() picks up upload attempts and retries. When the
    root logger has no handlers yet, the level starts at WARNING and only
    retries and failures are visible; setup_logging() lowers it.

    Authorization values must never be passed to these loggers.
    """
    logger = logging.getLogger(name)
    logger.propagate = True

    if not logging.getLogger().handlers:
        logger.setLevel(logging.WARNING)

    return logger
