"""
Logging setup for the NapChart API.

Everything goes through the standard :mod:`logging` module.  Service
modules log through ``logging.getLogger(__name__)`` so records carry
their dotted module path (``napchart_api.app.services.nap_service``)
and can be filtered per layer.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are chatty at DEBUG/INFO.
NOISY_LOGGERS = ("uvicorn.access", "urllib3", "httpx")


def setup_logging(
    level: str = "INFO",
    logfile: Optional[str] = None,
    quiet: Iterable[str] = NOISY_LOGGERS,
) -> None:
    """Attach console (and optionally file) handlers to the root logger.

    Parameters
    ----------
    level : str
        Level name for the root logger, case insensitive.  Unknown
        names fall back to ``INFO``.
    logfile : Optional[str]
        Also append records to this file when given.
    quiet : Iterable[str]
        Loggers raised to ``WARNING`` unless ``level`` is ``DEBUG``.
    """
    root = logging.getLogger()
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    root.setLevel(numeric_level)
    if root.handlers:
        # pytest, uvicorn or a second create_app call got there first.
        return

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if numeric_level > logging.DEBUG:
        for name in quiet:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Logging configured at %s", logging.getLevelName(numeric_level))
