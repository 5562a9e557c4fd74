import logging
import os
from typing import Dict


_LOGGER_CACHE: Dict[str, logging.Logger] = {}


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger.

    Respects WEBJOURNEY_DEBUG env var to set DEBUG/INFO level.
    Ensures we don't duplicate handlers across multiple imports.
    """
    lg = _LOGGER_CACHE.get(name)
    if lg:
        return lg
    lg = logging.getLogger(name)
    # Configure only if not configured yet
    if not lg.handlers:
        level = logging.DEBUG if str(os.getenv("WEBJOURNEY_DEBUG", "false")).lower() == "true" else logging.INFO
        lg.setLevel(level)
        handler = logging.StreamHandler()
        handler.setLevel(level)
        fmt = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        handler.setFormatter(fmt)
        lg.addHandler(handler)
        lg.propagate = False
    _LOGGER_CACHE[name] = lg
    return lg


def set_debug(enabled: bool) -> None:
    """Switch every logger handed out by get_logger (and the package root) to DEBUG or INFO."""
    level = logging.DEBUG if enabled else logging.INFO
    logging.getLogger("webjourney_core").setLevel(level)
    for lg in _LOGGER_CACHE.values():
        lg.setLevel(level)
        for handler in lg.handlers:
            handler.setLevel(level)
