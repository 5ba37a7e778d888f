from __future__ import annotations
import sys
import argparse
import codecs
import signal
import traceback

from lenkit import __version__
from .errors import InvalidArgument, LenkitError
from .lengths import build_predicate, count_by_length, extreme_length, filter_rows, parse_mode
from .render import LengthReport, count_report, extreme_report, filter_report, get_renderer
from .utils import io as UIO
from .utils import parsing as UP
from .utils import logging as ULOG
from .utils import columns as UCOL
from .utils import formatters as UFMT

FORMAT_HELP = "Output format: table (default), markdown|md, delimited|csv, structured|json."
SEP_HELP = "Field separator: a single character or csv, tsv, tab, '\\t', pipe, semicolon, auto"

logger = ULOG.get_logger("lenkit.core")


#-- Command Handlers --
def _handle_count(table: UIO.Table, args: argparse.Namespace) -> LengthReport:
    """Number of values per character length in the target column."""
    column = UCOL.resolve_column(table.header, args.column)
    counts = count_by_length(table.rows, column)
    logger.debug("Column '%s' at index %d: %d distinct length(s).",
                 column.name, column.index, len(counts))
    return count_report(counts, column)


def _check_filter(args: argparse.Namespace) -> None:
    args.predicate = build_predicate(args.length, args.min_length, args.max_length)


def _handle_filter(table: UIO.Table, args: argparse.Namespace) -> LengthReport:
    """Full rows whose target value satisfies the length predicate."""
    if table.kind != UIO.DELIMITED:
        raise InvalidArgument("filter only supports delimited text input.")
    predicate = getattr(args, "predicate", None) or build_predicate(
        args.length, args.min_length, args.max_length)
    column = UCOL.resolve_column(table.header, args.column)
    rows = filter_rows(table.rows, column, predicate)
    logger.debug("%d of %d row(s) match %s.", len(rows), len(table.rows), predicate.describe())
    return filter_report(table, rows, column)


def _check_extreme(args: argparse.Namespace) -> None:
    args.mode = parse_mode(args.mode)


def _handle_extreme(table: UIO.Table, args: argparse.Namespace) -> LengthReport:
    """Minimum or maximum length with the values reaching it and their lines."""
    if table.kind != UIO.DELIMITED:
        raise InvalidArgument("extreme only supports delimited text input.")
    column = UCOL.resolve_column(table.header, args.column)
    champ = extreme_length(table.rows, column, mode=getattr(args, "mode", "min"))
    logger.debug("%s length for '%s': %s (%d value(s)).",
                 champ.mode, column.name, champ.length, len(champ.values))
    return extreme_report(champ, column)


#-- Parser --
def _add_column_args(p: argparse.ArgumentParser, *, sep_default: str) -> None:
    g = p.add_argument_group("Column")
    g.add_argument("-c", "--column", required=True,
                   help="Name of the target column (case-sensitive).")
    g.add_argument("-s", "--separator", default=sep_default,
                   help=f"{SEP_HELP} (default: {sep_default}).")
    g.add_argument("-o", "--output", default="table", help=FORMAT_HELP)


def _add_count_args(p: argparse.ArgumentParser) -> None:
    UP.add_common_io_args(p)
    _add_column_args(p, sep_default="auto")


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    UP.add_common_io_args(p)
    _add_column_args(p, sep_default=",")
    g = p.add_argument_group("Length filter")
    g.add_argument("-l", "--length", metavar="N",
                   help="Exact length (cannot be combined with --min-length/--max-length).")
    g.add_argument("-n", "--min-length", dest="min_length", metavar="N",
                   help="Minimum length, inclusive.")
    g.add_argument("-x", "--max-length", dest="max_length", metavar="N",
                   help="Maximum length, inclusive.")


def _add_extreme_args(p: argparse.ArgumentParser) -> None:
    UP.add_common_io_args(p, file_required=True)
    _add_column_args(p, sep_default=",")
    p.add_argument("-m", "--mode", default="min",
                   help="Which extremum to report: min (default) or max.")


COMMANDS = {
    "count": dict(
        tool="count-by-length",
        help="Count values grouped by character length.",
        description="Counts the values of one column by their length (after stripping "
                    "enclosing quotes and blanks). The separator is detected from the "
                    "header unless given.",
        examples=["lenkit count -f data.csv -c City",
                  "cat data.tsv | lenkit count -c City -o json"],
        add_args=_add_count_args, handler=_handle_count, check=None,
    ),
    "filter": dict(
        tool="filter-by-length",
        help="Print rows whose column value has a given length.",
        description="Prints rows where the value in the column equals --length, or lies "
                    "within --min-length/--max-length (inclusive). Each row keeps its "
                    "original line number (header = line 1).",
        examples=["lenkit filter -f data.csv -c City -l 5",
                  "lenkit filter -f data.csv -c City -n 3 -x 7",
                  "cat data.csv | lenkit filter -c City -n 4 -o json"],
        add_args=_add_filter_args, handler=_handle_filter, check=_check_filter,
    ),
    "extreme": dict(
        tool="minmax-length",
        help="Report the shortest or longest values of a column.",
        description="Prints the minimum (or maximum) length found in the column and every "
                    "value of that length with the lines it occurs on.",
        examples=["lenkit extreme -f data.csv -c City",
                  "lenkit extreme -f data.csv -c City -m max -o csv"],
        add_args=_add_extreme_args, handler=_handle_extreme, check=_check_extreme,
    ),
}


def _configure_command(p: argparse.ArgumentParser, name: str) -> None:
    cmd = COMMANDS[name]
    cmd["add_args"](p)
    p.set_defaults(command=name, handler=cmd["handler"], check=cmd["check"])


def build_parser() -> argparse.ArgumentParser:
    ap = UFMT.CustomArgumentParser(
        prog="lenkit",
        description="Inspect one column of a CSV/JSON table by value length.",
    )
    ap.add_argument("--version", action="version", version=__version__)
    subs = ap.add_subparsers(dest="command", metavar="command", required=True,
                             parser_class=UFMT.CustomArgumentParser)
    for name, cmd in COMMANDS.items():
        p = subs.add_parser(name, help=cmd["help"], description=cmd["description"],
                            epilog=UP.build_epilog("Examples:", cmd["examples"]))
        _configure_command(p, name)
    return ap


def build_tool_parser(name: str) -> argparse.ArgumentParser:
    """Parser for one command installed as its own script (e.g. count-by-length)."""
    cmd = COMMANDS[name]
    examples = [x.replace(f"lenkit {name}", cmd["tool"]) for x in cmd["examples"]]
    p = UFMT.CustomArgumentParser(prog=cmd["tool"], description=cmd["description"],
                                  epilog=UP.build_epilog("Examples:", examples))
    p.add_argument("--version", action="version", version=__version__)
    _configure_command(p, name)
    return p


def run_handler(args: argparse.Namespace) -> int:
    handler = getattr(args, "handler", None)
    if handler is None:
        raise InvalidArgument("No command selected. Use --help.")

    # Everything that can be rejected from the flags alone is rejected
    # before any input is read.
    check = getattr(args, "check", None)
    if check is not None:
        check(args)
    renderer = get_renderer(args.output)
    UP.normalize_sep(args.separator)
    try:
        codecs.lookup(args.encoding)
    except LookupError:
        raise InvalidArgument(f"Unknown encoding '{args.encoding}'.") from None

    text = UIO.read_text(args.file, encoding=args.encoding)
    table = UIO.load_table(text, sep=args.separator)
    report = handler(table, args)
    UIO.write_output(renderer.render(report), getattr(args, "out_file", None),
                     encoding=args.encoding)
    return 0


def _run(parser: argparse.ArgumentParser, argv: list[str]) -> int:
    if not argv:
        parser.print_help(sys.stderr)
        return 1
    if hasattr(signal, "SIGPIPE"):
        signal.signal(signal.SIGPIPE, signal.SIG_DFL)

    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return 0 if e.code in (0, None) else 1

    quiet = getattr(args, "quiet", False)
    debug = getattr(args, "debug", False)
    log_file = getattr(args, "log_file", None)
    try:
        ULOG.configure(quiet=quiet, debug=debug, log_file=log_file)
    except OSError as e:
        ULOG.configure(quiet=quiet, debug=debug)
        logger.error(f"Cannot open log file '{log_file}': {e.strerror or e}")
        return 1

    try:
        return run_handler(args)
    except LenkitError as e:
        logger.error(str(e))
        if debug: traceback.print_exc()
        return 1
    except BrokenPipeError:
        return 0
    except (OSError, ValueError, LookupError) as e:
        logger.error(str(e))
        if debug: traceback.print_exc()
        return 1


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    return _run(build_parser(), argv)


def _tool_main(name: str, argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    return _run(build_tool_parser(name), argv)


def count_main(argv=None) -> int:
    return _tool_main("count", argv)


def filter_main(argv=None) -> int:
    return _tool_main("filter", argv)


def extreme_main(argv=None) -> int:
    return _tool_main("extreme", argv)


if __name__ == "__main__":
    raise SystemExit(main())
