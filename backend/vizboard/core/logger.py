"""Application logger.

Every module logs through the single ``vizboard`` logger exposed here.
``configure_logging`` is called once at startup; uvicorn keeps its own
access log configuration.
"""

import logging

from vizboard.core.config import settings

logger = logging.getLogger("vizboard")


def configure_logging(level: str | None = None) -> None:
    """Attach a stream handler to the app logger and set its level."""
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(handler)
    logger.setLevel((level or settings.LOG_LEVEL).upper())
