from __future__ import annotations
import argparse, shutil, sys
from typing import Dict

_TERM_WIDTH = shutil.get_terminal_size((100, 20)).columns

USAGE_ERROR = 1


def _is_subparsers_action(action: argparse.Action) -> bool:
    """
    Return True for the 'subparsers' action using only public APIs:
    a mapping of names -> ArgumentParser instances.
    """
    choices = getattr(action, "choices", None)
    if not isinstance(choices, dict) or not choices:
        return False
    return all(isinstance(p, argparse.ArgumentParser) for p in choices.values())


class EnhancedHelpFormatter(argparse.RawDescriptionHelpFormatter):
    """
    Help formatter with wider output, verbatim epilogs (the examples blocks)
    and a compact "Commands:" listing for subparsers.
    """

    def __init__(self, prog: str) -> None:
        # 32 aligns help text nicely for the length options.
        super().__init__(prog, max_help_position=32, width=_TERM_WIDTH)

    def _format_action(self, action: argparse.Action) -> str:
        if _is_subparsers_action(action):
            return self._format_subparsers(action)
        return super()._format_action(action)

    def _format_subparsers(self, action: argparse.Action) -> str:
        helps: Dict[str, str] = {}
        for choice_action in getattr(action, "_choices_actions", []):
            name = getattr(choice_action, "dest", None)
            if name:
                helps[name] = getattr(choice_action, "help", "") or ""

        rows = [(name, helps.get(name, "")) for name in action.choices.keys() if name in helps]
        if not rows:
            return ""

        maxlen = max(len(n) for n, _ in rows)
        out_lines = ["Commands:\n"]
        for name, short in rows:
            pad = " " * (maxlen - len(name))
            out_lines.append(f"  {name}{pad}  {short}\n")
        return "".join(out_lines)


class CustomArgumentParser(argparse.ArgumentParser):
    """
    ArgumentParser that prints the usage before reporting an error and exits
    with status 1, the code every lenkit failure uses.
    """

    def __init__(self, *args, **kwargs) -> None:
        kwargs.setdefault("formatter_class", EnhancedHelpFormatter)
        super().__init__(*args, **kwargs)

    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(USAGE_ERROR, f"Error: {message}\n")
