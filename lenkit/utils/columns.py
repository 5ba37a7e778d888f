from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence

from lenkit.errors import ColumnNotFound
from lenkit.utils.parsing import normalize_cell


@dataclass(frozen=True)
class ColumnRef:
    """A requested column name bound to its 0-based position in one header."""
    name: str
    index: int


def header_names(header: Sequence[str]) -> list[str]:
    return [normalize_cell(h) for h in header]


def resolve_column(header: Sequence[str], name: str) -> ColumnRef:
    """
    Resolve `name` against the raw header fields.
    Each field is normalized (quotes/blanks stripped) before an exact,
    case-sensitive comparison; the first match wins.
    Raises ColumnNotFound when nothing matches.
    """
    names = header_names(header)
    try:
        j = names.index(name)
    except ValueError:
        raise ColumnNotFound(name, names) from None
    return ColumnRef(name=name, index=j)
