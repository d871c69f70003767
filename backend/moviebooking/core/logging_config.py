import logging
from moviebooking.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | None = None) -> logging.Logger:
    """
    Configure the package logger.

    Attaches a single stream handler to the ``moviebooking`` logger so module
    loggers created with ``logging.getLogger(__name__)`` share one format.
    Calling it again only updates the level.
    """
    logger = logging.getLogger("moviebooking")
    logger.setLevel(getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.INFO))

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)

    return logger
