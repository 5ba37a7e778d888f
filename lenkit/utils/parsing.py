from __future__ import annotations
import argparse
from typing import Iterable, Optional, Sequence

from lenkit.errors import InvalidArgument

# Priority order matters: ties in detect_separator go to the earlier entry.
DEFAULT_SEPARATORS: tuple[str, ...] = (",", ";", "\t", "|")

_QUOTE = '"'
_BLANKS = " \t"

AUTO = None

# Line-oriented helpers, one record per line. A quoted field that contains
# the separator is split like any other field.

def split_fields(line: str, sep: str) -> list[str]:
    """Split one line on every occurrence of `sep` (no quoting, no collapsing)."""
    return line.split(sep)


def join_fields(fields: Iterable[str], sep: str) -> str:
    return sep.join(fields)


def _normalize_once(raw: str) -> str:
    s = raw
    if len(s) >= 2 and s[0] == _QUOTE and s[-1] == _QUOTE:
        s = s[1:-1]
    return s.strip(_BLANKS)


def normalize_cell(raw: str) -> str:
    """
    Logical value of a raw field: drop one enclosing pair of double quotes,
    then trim spaces and tabs. Applied until stable so that the result is a
    fixed point (normalize_cell(normalize_cell(s)) == normalize_cell(s)).
    """
    prev, cur = None, raw
    while cur != prev:
        prev, cur = cur, _normalize_once(cur)
    return cur


def detect_separator(header_line: str,
                     candidates: Sequence[str] = DEFAULT_SEPARATORS) -> str:
    """Pick the candidate occurring most often in the header; comma on no hits."""
    if not candidates:
        return ","
    counts = {c: header_line.count(c) for c in candidates}
    best = max(candidates, key=lambda c: counts[c])
    return best if counts[best] > 0 else ","


def normalize_sep(sep: Optional[str]) -> Optional[str]:
    """
    Map separator tokens to the actual character; None means auto-detect.
    Accepts: csv/comma, tsv/tab/'\\t', pipe/bar, semicolon/semi, auto/guess,
    or any single literal character.
    """
    if sep is None:
        return AUTO
    s = str(sep)
    low = s.strip().lower()
    if low in {"csv", "comma"}: return ","
    if low in {"tsv", "tab"}:   return "\t"
    if s == r"\t":              return "\t"
    if low in {"pipe", "bar"}:  return "|"
    if low in {"semicolon", "semi"}: return ";"
    if low in {"auto", "guess"}: return AUTO
    if len(s) != 1:
        raise InvalidArgument(f"Separator must be a single character, got '{s}'.")
    return s


def build_epilog(title: str, items: list[str]) -> str:
    if not items:
        return ""
    width = max(len(x) for x in items)
    lines = ["", title]
    for x in items:
        pad = " " * (width - len(x))
        lines.append(f"  {x}{pad}  ")
    return "\n".join(lines)


def add_common_io_args(ap: argparse.ArgumentParser, *, file_required: bool = False) -> None:
    g = ap.add_argument_group("I/O")
    g.add_argument("-f", "--file", required=file_required,
                   help="Input file (required)." if file_required
                   else "Input file (default: stdin).")
    g.add_argument("-O", "--out-file", dest="out_file", help="Output file (default: stdout).")
    g.add_argument("--encoding", default="utf-8", help="Input/output encoding (default: utf-8).")
    g.add_argument("--quiet", action="store_true", help="Only report errors.")
    g.add_argument("--debug", action="store_true", help="Verbose diagnostics and tracebacks.")
    g.add_argument("--log-file", dest="log_file", help="Also write diagnostics to this file.")
