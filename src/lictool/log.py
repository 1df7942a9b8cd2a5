"""
lictool.log - Logging Setup
===========================

Library modules log through ``logging.getLogger(__name__)`` and never
configure handlers themselves. The CLI calls :func:`configure_logging` once
to route the ``lictool`` logger hierarchy to stderr through rich.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "lictool"


def configure_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    """
    Attach a :class:`~rich.logging.RichHandler` to the ``lictool`` logger.

    Parameters
    ----------
    verbose : bool
        Log at DEBUG instead of WARNING.
    console : Console | None
        Destination console; defaults to a stderr console.

    Returns
    -------
    logging.Logger
        The configured package logger. Calling this again only adjusts the
        level; no second handler is added.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_time=verbose,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.propagate = False

    return logger
