from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from lenkit.errors import InvalidArgument
from lenkit.utils.columns import ColumnRef
from lenkit.utils.io import Row
from lenkit.utils.logging import get_logger
from lenkit.utils.parsing import normalize_cell

logger = get_logger(__name__)

MODES = ("min", "max")

_UINT_RE = re.compile(r"^[0-9]+$")


def cell_value(row: Row, column: ColumnRef) -> Optional[str]:
    """Normalized target value, or None when the row is too short to have one."""
    if len(row.fields) <= column.index:
        return None
    return normalize_cell(row.fields[column.index])


def _measured(rows: Iterable[Row], column: ColumnRef):
    """Yield (row, value, length) for every row that reaches the target column."""
    skipped = 0
    for row in rows:
        value = cell_value(row, column)
        if value is None:
            skipped += 1
            continue
        yield row, value, len(value)
    if skipped:
        logger.debug("Skipped %d row(s) without a '%s' field.", skipped, column.name)


# -- count-by-length --

def count_by_length(rows: Iterable[Row], column: ColumnRef) -> dict[int, int]:
    counts: dict[int, int] = {}
    for _, _, n in _measured(rows, column):
        counts[n] = counts.get(n, 0) + 1
    return counts


# -- min / max --

@dataclass
class Champion:
    """
    Running extremum for one pass over the rows.

    `values` maps each distinct value at the current best length to the
    line numbers it was seen on, in input order. Everything recorded for a
    superseded length is dropped.
    """
    mode: str = "min"
    length: Optional[int] = None
    values: dict[str, list[int]] = field(default_factory=dict)

    def beats(self, n: int) -> bool:
        if self.length is None:
            return True
        return n < self.length if self.mode == "min" else n > self.length

    def offer(self, value: str, line: int) -> "Champion":
        n = len(value)
        if self.beats(n):
            return Champion(mode=self.mode, length=n, values={value: [line]})
        if n == self.length:
            self.values.setdefault(value, []).append(line)
        return self


def parse_mode(text: Optional[str]) -> str:
    mode = (text or "min").strip().lower()
    if mode not in MODES:
        raise InvalidArgument(f"Invalid mode '{text}'. Allowed: min, max.")
    return mode


def extreme_length(rows: Iterable[Row], column: ColumnRef, mode: str = "min") -> Champion:
    champ = Champion(mode=parse_mode(mode))
    for row, value, _ in _measured(rows, column):
        champ = champ.offer(value, row.line)
    return champ


# -- filter --

@dataclass(frozen=True)
class ExactLength:
    length: int

    def __call__(self, n: int) -> bool:
        return n == self.length

    def describe(self) -> str:
        return f"length == {self.length}"


@dataclass(frozen=True)
class LengthRange:
    min_length: Optional[int] = None
    max_length: Optional[int] = None

    def __call__(self, n: int) -> bool:
        if self.min_length is not None and n < self.min_length:
            return False
        if self.max_length is not None and n > self.max_length:
            return False
        return True

    def describe(self) -> str:
        parts = []
        if self.min_length is not None:
            parts.append(f"length >= {self.min_length}")
        if self.max_length is not None:
            parts.append(f"length <= {self.max_length}")
        return " and ".join(parts)


def _as_length(opt: str, raw) -> Optional[int]:
    if raw is None or raw == "":
        return None
    text = str(raw).strip()
    if not _UINT_RE.match(text):
        raise InvalidArgument(f"{opt} must be a non-negative integer, got '{raw}'.")
    return int(text)


def build_predicate(length=None, min_length=None, max_length=None):
    """
    Validate the length options and return ExactLength or LengthRange.
    Values may be ints or the raw option strings.
    """
    has_exact = length not in (None, "")
    has_range = min_length not in (None, "") or max_length not in (None, "")
    if has_exact and has_range:
        raise InvalidArgument("--length cannot be combined with --min-length or --max-length.")
    if not has_exact and not has_range:
        raise InvalidArgument(
            "At least one length filter (--length, --min-length or --max-length) must be specified.")

    if has_exact:
        return ExactLength(_as_length("--length", length))

    lo = _as_length("--min-length", min_length)
    hi = _as_length("--max-length", max_length)
    if lo is not None and hi is not None and lo > hi:
        raise InvalidArgument("--min-length cannot be greater than --max-length.")
    return LengthRange(lo, hi)


def filter_rows(rows: Iterable[Row], column: ColumnRef, predicate) -> list[Row]:
    return [row for row, _, n in _measured(rows, column) if predicate(n)]
