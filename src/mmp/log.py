"""Logger helpers for the ``mmp`` namespace.

Progress reporting goes through these loggers; diagnostics about the template
itself are collected in an ErrorLog and printed by the command line instead.
"""

import logging
import sys
from typing import TextIO

BASE_LOGGER = "mmp"


def setup_base_logger(*, level: int = logging.WARNING, stream: TextIO | None = None) -> logging.Logger:
    """Configure the base ``mmp`` logger and return it.

    Calling again replaces the handler, so a new ``stream`` takes effect.
    """
    base = logging.getLogger(BASE_LOGGER)
    for handler in list(base.handlers):
        base.removeHandler(handler)
    base.setLevel(level)
    base.propagate = False
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    base.addHandler(handler)
    return base


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a namespaced logger under ``mmp``."""
    if not name or name == BASE_LOGGER:
        return logging.getLogger(BASE_LOGGER)
    if name.startswith(f"{BASE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{BASE_LOGGER}.{name}")
