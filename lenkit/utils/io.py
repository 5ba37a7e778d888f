from __future__ import annotations
import io as _io
import json
import os
import sys
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from lenkit.errors import FileNotFound, InvalidArgument
from lenkit.utils.logging import get_logger
from lenkit.utils.parsing import detect_separator, normalize_sep, split_fields

logger = get_logger(__name__)

DELIMITED = "delimited"
JSON = "json"


@dataclass(frozen=True)
class Row:
    """Raw fields of one data line and its 1-based line number (header = 1)."""
    line: int
    fields: tuple[str, ...]


@dataclass
class Table:
    header: list[str]
    rows: list[Row] = field(default_factory=list)
    sep: str = ","
    kind: str = DELIMITED


def read_text(path: Optional[str], *, encoding: str = "utf-8") -> str:
    """Read the whole input from a file path, or from stdin when path is None/'-'."""
    if path in (None, "-"):
        buf = getattr(sys.stdin, "buffer", None)
        try:
            raw = _io.TextIOWrapper(buf, encoding=encoding).read() if buf is not None else sys.stdin.read()
        except UnicodeDecodeError as e:
            raise InvalidArgument(f"Failed to decode stdin as {encoding}: {e.reason}.") from None
        if raw == "":
            raise InvalidArgument("No input detected on stdin. Pipe a table or use -f <file>.")
        return raw
    if not os.path.isfile(path):
        raise FileNotFound(path)
    try:
        with open(path, "r", encoding=encoding, newline="") as fh:
            raw = fh.read()
    except UnicodeDecodeError as e:
        raise InvalidArgument(f"Failed to decode {path} as {encoding}: {e.reason}.") from None
    if raw == "":
        raise InvalidArgument(f"Failed to read table from {path}: empty input.")
    return raw


def split_lines(text: str) -> list[str]:
    """One record per line; accepts \\n and \\r\\n, ignores a final newline."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [ln[:-1] if ln.endswith("\r") else ln for ln in lines]


def detect_input_kind(text: str) -> str:
    head = text.lstrip("\ufeff").lstrip()
    if head[:1] in ("[", "{"):
        return JSON
    return DELIMITED


def iter_rows(lines: Iterable[str], sep: str, *, start: int = 2) -> Iterator[Row]:
    """Tokenize data lines; blank lines are dropped but keep their line number."""
    for line_no, line in enumerate(lines, start=start):
        if line == "":
            continue
        yield Row(line=line_no, fields=tuple(split_fields(line, sep)))


def load_delimited(text: str, sep: Optional[str] = None) -> Table:
    """Header from the first line, data rows from the rest."""
    lines = split_lines(text.lstrip("\ufeff"))
    if not lines:
        raise InvalidArgument("Input has no header line.")
    header_line = lines[0]
    use_sep = normalize_sep(sep)
    if use_sep is None:
        use_sep = detect_separator(header_line)
        logger.debug("Detected separator %r from the header line.", use_sep)
    header = split_fields(header_line, use_sep)
    rows = list(iter_rows(lines[1:], use_sep))
    logger.debug("Read %d column(s) and %d data row(s).", len(header), len(rows))
    return Table(header=header, rows=rows, sep=use_sep, kind=DELIMITED)


def _json_text(v) -> str:
    if v is None:
        return "null"
    if isinstance(v, str):
        return v
    return json.dumps(v, ensure_ascii=False)


def load_json(text: str) -> Table:
    """
    Array of flat objects (or one object) as a Table. Header is the union of
    keys in first-seen order; a key missing from a record reads as "".
    Rows are numbered by record position, first record = 2.
    """
    try:
        data = json.loads(text.lstrip("\ufeff"))
    except json.JSONDecodeError as e:
        raise InvalidArgument(f"Failed to parse JSON input: {e}") from e
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        raise InvalidArgument("JSON input must be an array of objects.")

    header: list[str] = []
    seen = set()
    for rec in data:
        for k in rec:
            if k not in seen:
                seen.add(k)
                header.append(k)
    rows = [
        Row(line=i, fields=tuple(_json_text(rec[k]) if k in rec else "" for k in header))
        for i, rec in enumerate(data, start=2)
    ]
    logger.debug("Read %d JSON record(s) with %d key(s).", len(rows), len(header))
    return Table(header=header, rows=rows, sep=",", kind=JSON)


def load_table(text: str, sep: Optional[str] = None) -> Table:
    kind = detect_input_kind(text)
    logger.debug("Input looks like %s.", kind)
    if kind == JSON:
        return load_json(text)
    return load_delimited(text, sep)


def write_output(text: str, path: Optional[str] = None, *, encoding: str = "utf-8") -> None:
    """Write rendered output to a file or stdout; remain quiet on BrokenPipe."""
    if text and not text.endswith("\n"):
        text += "\n"
    if path in (None, "-"):
        try:
            sys.stdout.write(text)
            sys.stdout.flush()
        except BrokenPipeError:
            return
        return
    with open(path, "w", encoding=encoding, newline="") as out:
        out.write(text)
