from __future__ import annotations
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("lenkit")
except PackageNotFoundError:  # local dev
    __version__ = "0.0.0.dev0"

from . import core, lengths, render, utils
from .errors import ColumnNotFound, FileNotFound, InvalidArgument, LenkitError, UnsupportedFormat

__all__ = [
    "ColumnNotFound", "FileNotFound", "InvalidArgument", "LenkitError", "UnsupportedFormat",
    "core", "lengths", "render", "utils", "__version__",
]
