"""Command protocol for machine-tools CLI.

Defines the interface that CLI commands must implement. Each command owns
its argument parser configuration and execution logic; the entry point only
splits off the command name and hands the command its own arguments.

Usage:
    from machine_tools.cli.command_protocol import command_parser
    from machine_tools.cli.options import parse_options

    class MyCommand:
        name = "my-command"
        help = "Description of my command"

        @staticmethod
        def add_arguments(parser: argparse.ArgumentParser) -> None:
            parser.add_argument("--provider", help="Provider to use")

        @staticmethod
        def run(argv, env, output) -> int:
            parsed = parse_options(argv, command_parser(MyCommand), output)
            if parsed is None:
                return 0
            output.write_line(f"Targets: {parsed.args}")
            return 0
"""

from __future__ import annotations

import argparse
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from machine_tools.cli.output import Output
    from machine_tools.environment import Environment

PROG = "machine-tools"


@runtime_checkable
class Command(Protocol):
    """Protocol for CLI command classes.

    Attributes:
        name: The subcommand name (e.g., "status", "up").
        help: Brief help text shown in the top-level --help output.

    Methods:
        add_arguments: Register options on the command's parser.
        run: Parse the command's arguments and execute it.
    """

    name: str
    help: str

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        """Add command-specific options to the parser.

        Args:
            parser: The parser for this command.
        """
        ...

    @staticmethod
    def run(argv: list[str], env: Environment, output: Output) -> int:
        """Execute the command.

        Args:
            argv: Arguments following the command name.
            env: The project environment.
            output: Where user-facing text is written.

        Returns:
            Exit code (0 for success, non-zero for errors).
        """
        ...


def command_parser(
    command: type[Command], usage_args: str = "[options] [name|/regex/...]"
) -> argparse.ArgumentParser:
    """Create the option parser for a command and let it add its options."""
    parser = argparse.ArgumentParser(
        prog=f"{PROG} {command.name}",
        usage=f"{PROG} {command.name} {usage_args}".rstrip(),
        description=command.help,
        add_help=False,
    )
    command.add_arguments(parser)
    return parser
