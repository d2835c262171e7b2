"""
Logging utilities for the groupstats library.

Library code only calls get_logger(__name__); it never configures handlers
on the root logger. Applications (the GUI shell, the report exporter, a
script) may call configure_logging() to see groupstats output, or simply
configure logging themselves: groupstats records propagate to their
handlers.

Example Usage
-------------
In library code:
    from groupstats.utils.logging import get_logger
    logger = get_logger(__name__)
    logger.info("Loaded %d rows", n_rows)

In a standalone script:
    from groupstats.utils.logging import configure_logging
    configure_logging(level="DEBUG")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional, Union

LIBRARY_LOGGER_NAME = "groupstats"

DEFAULT_FMT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d:%(funcName)s: %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Marks the handler installed by configure_logging() so reconfiguration can find it.
_HANDLER_ATTR = "_groupstats_handler"

logging.getLogger(LIBRARY_LOGGER_NAME).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger inside the groupstats namespace.

    Module names already start with 'groupstats.'; anything else (tests,
    scripts) is nested under it so configure_logging() covers it too.
    """
    if name != LIBRARY_LOGGER_NAME and not name.startswith(LIBRARY_LOGGER_NAME + "."):
        name = f"{LIBRARY_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Optional[Union[str, int]] = None,
    *,
    fmt: Optional[str] = None,
    datefmt: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Configure logging for the groupstats logger only (never root).

    Parameters
    ----------
    level:
        Logging level (e.g. "DEBUG", "INFO"). Defaults to the
        GROUPSTATS_LOG_LEVEL env var, or "INFO" if unset.
    fmt:
        Log message format. Defaults to DEFAULT_FMT.
    datefmt:
        Date format. Defaults to DEFAULT_DATEFMT.
    force:
        If True, replace a handler installed by an earlier call. If False,
        an existing handler is kept and only the level is updated.
    """
    if level is None:
        level = os.environ.get("GROUPSTATS_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(LIBRARY_LOGGER_NAME)
    logger.setLevel(level)

    existing = [h for h in logger.handlers if getattr(h, _HANDLER_ATTR, False)]
    if existing and not force:
        for handler in existing:
            handler.setLevel(level)
        return
    for handler in existing:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FMT, datefmt or DEFAULT_DATEFMT))
    setattr(handler, _HANDLER_ATTR, True)
    logger.addHandler(handler)
