"""Single-line key=value logging for the rentmatch engine and API."""

from __future__ import annotations

import logging
import os
from typing import Optional, Union

ROOT_NAMESPACE = "rentmatch"
_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _level_from_env() -> int:
    name = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    # unknown names come back as the string "Level <name>"
    return level if isinstance(level, int) else logging.INFO


def configure_logging(
    namespace: str = ROOT_NAMESPACE, level: Optional[Union[int, str]] = None
) -> logging.Logger:
    """Attach one stream handler to ``namespace`` and return the logger.

    Calling again only adjusts the level, so importing modules in any order
    never stacks handlers.
    """

    logger = logging.getLogger(namespace)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
        logger.setLevel(_level_from_env())
    if level is not None:
        logger.setLevel(level)
    return logger


def get_logger(child: Optional[str] = None) -> logging.Logger:
    """Logger under the ``rentmatch`` namespace, e.g. ``get_logger("services.pricing")``."""

    base = configure_logging()
    return base.getChild(child) if child else base
