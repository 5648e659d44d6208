"""
Option parsing for commands.

Wraps argparse so that every command handles options the same way:

* The caller's argv is never modified.
* Every parser gets ``-h``/``--help``. Asking for help prints it through the
  output collaborator and returns None instead of exiting the process.
* A ``--`` end-of-options marker is consumed, not returned as a positional.
* Unrecognized options raise CLIInvalidOptions carrying the command's help
  text, instead of argparse's usage message and ``sys.exit(2)``.

Usage::

    parser = argparse.ArgumentParser(prog="machine-tools up", add_help=False)
    parser.add_argument("--provider")

    parsed = parse_options(argv, parser)
    if parsed is None:
        return 0  # help was printed

    parsed.options.provider, parsed.args
"""

from __future__ import annotations

import argparse
import re
from typing import TYPE_CHECKING, NamedTuple, Optional, Sequence

from machine_tools.exceptions import CLIInvalidOptions

if TYPE_CHECKING:
    from machine_tools.cli.output import Output

__all__ = ["ParsedOptions", "HelpAction", "install_help", "parse_options"]

HELP_FLAGS = ("-h", "--help")

_NEGATIVE_NUMBER = re.compile(r"^-\d+$|^-\d*\.\d+$")


class ParsedOptions(NamedTuple):
    """Parsed option values and the positional arguments left over."""

    options: argparse.Namespace
    args: list[str]


class _HelpRequested(Exception):
    """Raised by HelpAction to unwind out of argparse."""

    def __init__(self, parser: argparse.ArgumentParser):
        self.parser = parser
        super().__init__("help requested")


class _ParserError(Exception):
    """Raised in place of ArgumentParser.error() while parsing."""


class HelpAction(argparse.Action):
    """``-h``/``--help`` that stops parsing instead of exiting."""

    def __init__(
        self, option_strings, dest=argparse.SUPPRESS, default=argparse.SUPPRESS, help=None
    ):
        super().__init__(
            option_strings=option_strings, dest=dest, default=default, nargs=0, help=help
        )

    def __call__(self, parser, namespace, values, option_string=None):
        raise _HelpRequested(parser)


def install_help(parser: argparse.ArgumentParser) -> None:
    """Add ``-h``/``--help`` to the parser, replacing argparse's exiting help.

    Flags already used by some other option are left alone.
    """
    flags = []
    for flag in HELP_FLAGS:
        existing = parser._option_string_actions.get(flag)
        if existing is None:
            flags.append(flag)
        elif type(existing) is argparse._HelpAction:
            existing.container._handle_conflict_resolve(None, [(flag, existing)])
            flags.append(flag)

    if flags:
        parser.add_argument(*flags, action=HelpAction, help="Print this help")


def parse_options(
    argv: Sequence[str],
    parser: Optional[argparse.ArgumentParser] = None,
    output: Optional[Output] = None,
) -> Optional[ParsedOptions]:
    """
    Parse options from argv with the given parser.

    Args:
        argv: Arguments to parse. A copy is parsed; the original is untouched.
        parser: Parser describing the command's options (default: no options)
        output: Where help text is written (default: the console)

    Returns:
        ParsedOptions, or None if help was requested and printed. Callers
        should return without doing anything else when None is returned.

    Raises:
        CLIInvalidOptions: An unrecognized or malformed option was given
    """
    argv = list(argv)

    if parser is None:
        parser = argparse.ArgumentParser(add_help=False)
    if output is None:
        from machine_tools.cli.output import ConsoleOutput

        output = ConsoleOutput()

    install_help(parser)

    def _error(message):
        raise _ParserError(message)

    # argparse reports problems through error(), which exits the process
    parser.error = _error
    try:
        options, remaining = parser.parse_known_args(argv)
    except _HelpRequested as e:
        # options given before the help flag are still checked
        _reject_unknown(parser, _extras_before_help(parser, argv))
        output.write_line(e.parser.format_help().rstrip("\n"))
        return None
    except (_ParserError, argparse.ArgumentError) as e:
        raise CLIInvalidOptions(help=_help_text(parser), reason=str(e)) from e
    finally:
        del parser.error

    _reject_unknown(parser, remaining)
    if "--" in remaining:
        remaining.remove("--")

    return ParsedOptions(options, remaining)


def _extras_before_help(parser: argparse.ArgumentParser, argv: list[str]) -> list[str]:
    """Arguments the parser leaves over from those preceding the help flag."""
    end = len(argv)
    for index, arg in enumerate(argv):
        if arg == "--":
            break
        if arg in HELP_FLAGS:
            end = index
            break

    try:
        return parser.parse_known_args(argv[:end])[1]
    except (_HelpRequested, _ParserError, argparse.ArgumentError):
        return []


def _reject_unknown(parser: argparse.ArgumentParser, args: list[str]) -> None:
    unknown = _unknown_options(args)
    if unknown:
        raise CLIInvalidOptions(
            help=_help_text(parser),
            reason="unrecognized arguments: " + " ".join(unknown),
        )


def _unknown_options(args: list[str]) -> list[str]:
    unknown = []
    for arg in args:
        if arg == "--":
            break
        if arg.startswith("-") and arg != "-" and not _NEGATIVE_NUMBER.match(arg):
            unknown.append(arg)
    return unknown


def _help_text(parser: argparse.ArgumentParser) -> str:
    return parser.format_help().rstrip("\n")
