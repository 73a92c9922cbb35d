"""Logging setup for the food diary service."""

import logging

_LOGGER_NAME = "food_diary"
# Loggers that emit a line per outgoing OpenAI request at INFO.
_CHATTY_LOGGERS = ("httpx", "openai")


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach one stream handler to the package logger and apply the level.

    Repeated calls only update the level.
    """
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level.upper())
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)
        logger.propagate = False
    return logger
