# Line parsing, column lookup, I/O and CLI helpers shared by the lenkit commands.
from __future__ import annotations

from . import io, parsing, columns, formatters
from . import logging as ULOG

__all__ = ["io", "parsing", "columns", "formatters", "ULOG"]
