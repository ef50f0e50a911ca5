"""
adorn: priority-ordered extensions for command definitions.

The host model (Command, Flag, ParsedArguments) and the pipeline (Extension,
extend, postprocess, invoke) are re-exported here. Builtin extensions live in
adorn.extensions and the logging setup in adorn.logs.
"""
import re
from typing import NamedTuple

__title__ = 'adorn'
__author__ = 'Eiko Reishin (影皇嶺臣)'
__license__ = 'MIT'
# Placeholder, modified by dynamic-versioning.
__version__ = "0.0.0"

from .commands import *
from .faults import *
from .pipeline import *


class VersionInfo(NamedTuple):
    major: int
    minor: int
    micro: int
    releaselevel: str
    serial: int
    metadata: str


def _version_info(version, /):
    major, minor, micro, metadata = re.fullmatch(r"(\d+)\.(\d+)\.(\d+)(?:\+(.*))?", version).groups()
    return VersionInfo(int(major), int(minor), int(micro), "final", 0, metadata or "")


version_info = _version_info(__version__)

__all__ = (
    "__title__",
    "__author__",
    "__license__",
    "__version__",
    "version_info",
    *commands.__all__,  # type: ignore[name-defined]
    *faults.__all__,  # type: ignore[name-defined]
    *pipeline.__all__,  # type: ignore[name-defined]
)
