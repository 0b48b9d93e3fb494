"""
Process-wide logging for the API.

Records go to stderr and, when ``LOG_FILE`` is set, to that file too,
all in one ``time [LEVEL] logger: message`` format.  The neo4j driver
reports every connection pool event at DEBUG; those only come through
when the API itself runs at DEBUG.
"""

import logging
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DRIVER_LOGGERS = ("neo4j",)


def quiet_driver_logs(level: int) -> None:
    """Cap the graph driver's loggers at WARNING unless ``level`` is DEBUG."""
    driver_level = logging.NOTSET if level <= logging.DEBUG else logging.WARNING
    for name in DRIVER_LOGGERS:
        logging.getLogger(name).setLevel(driver_level)


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Attach the API's handlers to the root logger.

    ``level`` is a level name, case insensitive; unknown names mean
    INFO.  Handlers are only added while the root logger has none, so
    calling this again (every ``create_app``) just re-applies the
    driver cap.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    quiet_driver_logs(numeric_level)

    root = logging.getLogger()
    if root.handlers:
        return
    root.setLevel(numeric_level)

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if logfile:
        handlers.append(logging.FileHandler(Path(logfile).resolve(), encoding="utf-8"))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
