import logging
import sys
from typing import Optional, TextIO

_FMT = "[%(levelname)s] %(message)s"
_FILE_FMT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"

def configure(level: int = logging.WARNING, *, quiet: bool = False,
              debug: bool = False, log_file: Optional[str] = None,
              stream: Optional[TextIO] = None) -> None:
    """
    Route lenkit diagnostics to stderr (and optionally a file).

    The quiet/debug level applies to the console only; a log file always
    receives DEBUG records. Raises OSError if log_file cannot be opened.
    """
    if quiet:
        level = logging.ERROR
    if debug:
        level = logging.DEBUG
    handlers: list[logging.Handler] = []
    root_level = level
    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FILE_FMT))
        handlers.append(fh)
        root_level = logging.DEBUG
    console = logging.StreamHandler(stream or sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_FMT))
    handlers.insert(0, console)
    logging.basicConfig(level=root_level, handlers=handlers, force=True)

def get_logger(name: str = "lenkit"):
    if name != "lenkit" and not name.startswith("lenkit."):
        name = f"lenkit.{name}"
    return logging.getLogger(name)
