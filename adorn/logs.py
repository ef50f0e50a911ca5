"""
Logging setup for applications built on adorn.

The library only emits records (module loggers under the "adorn" namespace);
it never attaches handlers on import. Applications call install() once at
startup to route those records through rich on stderr.

Level resolution
- the `level` argument when given (name or number),
- otherwise the ADORN_LOG_LEVEL environment variable,
- otherwise WARNING.
"""
import logging
import os

from rich.console import Console
from rich.logging import RichHandler

from .utils import *


def install(level=Unset, /, *, environ=Unset):
    """
    Attach a RichHandler to the "adorn" logger and set its level.

    Calling install() again replaces the handler installed before.

    Returns
    - the configured logging.Logger.
    """
    environ = coalesce(environ, os.environ)
    level = coalesce(level, environ.get("ADORN_LOG_LEVEL", "WARNING"))
    if isinstance(level, str):
        if not isinstance(resolved := logging.getLevelName(level.strip().upper()), int):
            raise ValueError(f"install() unknown logging level {level!r}")
        level = resolved
    elif not isinstance(level, int) or isinstance(level, bool):
        raise TypeError("install() level must be a string or an integer")

    logger = logging.getLogger("adorn")
    for handler in [handler for handler in logger.handlers if isinstance(handler, RichHandler)]:
        logger.removeHandler(handler)

    handler = RichHandler(console=Console(stderr=True), show_path=False, markup=False)
    handler.setFormatter(logging.Formatter("%(name)s - %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger


__all__ = (
    "install",
)
