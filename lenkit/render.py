from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

import pandas as pd
from wcwidth import wcswidth

from lenkit.errors import UnsupportedFormat
from lenkit.lengths import Champion
from lenkit.utils.columns import ColumnRef, header_names
from lenkit.utils.io import Row, Table
from lenkit.utils.parsing import normalize_cell


@dataclass
class LengthReport:
    """
    Uniform result handed to every renderer.

    frame : one output record per row, columns in display order
    title : optional line shown above human-readable tables
    sep   : separator used by the delimited renderer
    """
    frame: pd.DataFrame
    title: Optional[str] = None
    sep: str = ","


# -- report builders --

def count_report(counts: dict[int, int], column: ColumnRef) -> LengthReport:
    frame = pd.DataFrame(sorted(counts.items()), columns=["length", "count"])
    return LengthReport(frame=frame, title=f'Column "{column.name}"')


def extreme_report(champ: Champion, column: ColumnRef) -> LengthReport:
    label = "minimum" if champ.mode == "min" else "maximum"
    records = [(champ.length, value, list(lines)) for value, lines in champ.values.items()]
    frame = pd.DataFrame(records, columns=["length", "value", "lines"])
    if champ.length is None:
        title = f'Column "{column.name}": no values'
    else:
        title = f'Column "{column.name}": {label} length {champ.length}'
    return LengthReport(frame=frame, title=title)


def filter_report(table: Table, rows: Sequence[Row], column: ColumnRef) -> LengthReport:
    names = header_names(table.header)
    width = max([len(names)] + [len(r.fields) for r in rows])
    # Fields past the header get positional names.
    names += [f"column{i}" for i in range(len(names) + 1, width + 1)]
    records = []
    for r in rows:
        cells = [normalize_cell(v) for v in r.fields]
        cells += [""] * (width - len(cells))
        records.append([r.line] + cells)
    frame = pd.DataFrame(records, columns=["line"] + names)
    return LengthReport(frame=frame, title=f'Column "{column.name}"', sep=table.sep)


# -- cell helpers --

_CTRL_RE = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")


def _cell_text(v) -> str:
    if isinstance(v, (list, tuple)):
        return " ".join(str(x) for x in v)
    if v is None:
        return ""
    return str(v)


def _display(v) -> str:
    s = _cell_text(v).replace("\r", "").replace("\n", "⏎")
    return _CTRL_RE.sub("", s)


def _width(s: str) -> int:
    w = wcswidth(s)
    return len(s) if w < 0 else w


def _numeric_columns(frame: pd.DataFrame) -> list[bool]:
    return [pd.api.types.is_numeric_dtype(frame.iloc[:, j]) for j in range(frame.shape[1])]


def _text_grid(frame: pd.DataFrame) -> tuple[list[str], list[list[str]]]:
    headers = [_display(c) for c in frame.columns]
    rows = [[_display(v) for v in row] for row in frame.itertuples(index=False, name=None)]
    return headers, rows


def _unique_names(names: Iterable[str]) -> list[str]:
    """Rename repeats the way pandas.read_csv does: a, a.1, a.2 ..."""
    out: list[str] = []
    used: set[str] = set()
    for n in names:
        cand, k = n, 0
        while cand in used:
            k += 1
            cand = f"{n}.{k}"
        used.add(cand)
        out.append(cand)
    return out


# -- renderers --

class Renderer:
    name = ""

    def render(self, report: LengthReport) -> str:
        raise NotImplementedError


class TableRenderer(Renderer):
    """ASCII table with MySQL-style borders; numeric columns right-aligned."""
    name = "table"

    def render(self, report: LengthReport) -> str:
        frame = report.frame
        headers, rows = _text_grid(frame)
        numeric = _numeric_columns(frame)
        out: list[str] = []
        if report.title:
            out.append(report.title)
        if not headers:
            out.append("(empty table)")
            return "\n".join(out) + "\n"

        widths = [max(_width(x) for x in col) for col in zip(*([headers] + rows))]

        def hline() -> str:
            return "+" + "+".join("-" * (w + 2) for w in widths) + "+"

        def render_row(vals, is_header=False) -> str:
            cells = []
            for i, w in enumerate(widths):
                pad = " " * (w - _width(vals[i]))
                if not is_header and numeric[i]:
                    cells.append(" " + pad + vals[i] + " ")
                else:
                    cells.append(" " + vals[i] + pad + " ")
            return "|" + "|".join(cells) + "|"

        out.append(hline())
        out.append(render_row(headers, is_header=True))
        out.append(hline())
        out.extend(render_row(r) for r in rows)
        out.append(hline())
        return "\n".join(out) + "\n"


class MarkdownRenderer(Renderer):
    name = "markdown"

    def render(self, report: LengthReport) -> str:
        headers, rows = _text_grid(report.frame)
        if not headers:
            return ""
        numeric = _numeric_columns(report.frame)
        widths = [max(3, *(_width(x) for x in col)) for col in zip(*([headers] + rows))]

        def line(vals) -> str:
            cells = []
            for v, w, num in zip(vals, widths, numeric):
                pad = " " * (w - _width(v))
                cells.append(pad + v if num else v + pad)
            return "| " + " | ".join(cells) + " |"

        rule = "|" + "|".join(("-" * (w + 1) + ":") if num else ("-" * (w + 2))
                              for w, num in zip(widths, numeric)) + "|"
        out = [line(headers), rule] + [line(r) for r in rows]
        return "\n".join(out) + "\n"


class DelimitedRenderer(Renderer):
    """Header plus one joined line per record. Cells are never quoted."""
    name = "delimited"

    def render(self, report: LengthReport) -> str:
        sep = report.sep
        frame = report.frame
        out = [sep.join(str(c) for c in frame.columns)]
        for row in frame.itertuples(index=False, name=None):
            out.append(sep.join(_cell_text(v) for v in row))
        return "\n".join(out) + "\n"


class StructuredRenderer(Renderer):
    """JSON array of records; numeric columns stay numbers."""
    name = "structured"

    def render(self, report: LengthReport) -> str:
        frame = report.frame
        frame = frame.set_axis(_unique_names(str(c) for c in frame.columns), axis=1)
        if frame.empty:
            return "[]\n"
        return frame.to_json(orient="records", force_ascii=False, indent=2) + "\n"


RENDERERS: dict[str, type[Renderer]] = {
    cls.name: cls for cls in (TableRenderer, MarkdownRenderer, DelimitedRenderer, StructuredRenderer)
}

ALIASES = {
    "pretty": "table", "text": "table",
    "md": "markdown",
    "csv": "delimited",
    "json": "structured",
}

FORMATS = tuple(RENDERERS) + tuple(ALIASES)


def get_renderer(token: Optional[str]) -> Renderer:
    key = (token or "table").strip().lower()
    key = ALIASES.get(key, key)
    cls = RENDERERS.get(key)
    if cls is None:
        raise UnsupportedFormat(str(token), FORMATS)
    return cls()


def render(report: LengthReport, fmt: Optional[str] = "table") -> str:
    return get_renderer(fmt).render(report)
