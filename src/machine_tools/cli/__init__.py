"""
Command-line interface for machine-tools.

Provides CLI commands via the `machine-tools` or `mct` command:

    machine-tools status [names]    - Show the state of machines
    machine-tools up [names]        - Bring machines up
    machine-tools destroy [names]   - Destroy machines (last configured first)
    machine-tools primary           - Show the machine single-target commands use
    machine-tools config <command>  - View/manage configuration

Machine names can be literal names or regular expressions wrapped in
slashes. With no names, every machine in the Machinefile is targeted.

Examples:
    mct status
    mct up web db --provider docker
    mct status "/^web/"
    mct -v destroy --force
    mct config show
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from machine_tools import __version__
from machine_tools.cli.argv import split_main_and_subcommand
from machine_tools.cli.command_protocol import PROG
from machine_tools.cli.options import parse_options
from machine_tools.cli.output import ConsoleOutput
from machine_tools.cli.registry import discover_commands
from machine_tools.cli.utils import print_error
from machine_tools.config import Config, default_start_dir
from machine_tools.environment import Environment
from machine_tools.exceptions import MachineToolsError
from machine_tools.log import enable_verbose

logger = logging.getLogger(__name__)

__all__ = ["main", "create_parser"]


def create_parser(commands: dict) -> argparse.ArgumentParser:
    """Create the parser for the global flags that precede the command name."""
    listing = "\n".join(f"    {name:<10}{cls.help}" for name, cls in commands.items())
    parser = argparse.ArgumentParser(
        prog=PROG,
        usage=f"{PROG} [-v] [--version] [-h] <command> [<args>]",
        description="Manage named machines backed by providers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"Available commands:\n{listing}\n\n"
        f"Run '{PROG} <command> -h' for help on a command.",
        add_help=False,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="store_true", help="Print the version and exit")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for machine-tools CLI."""
    if argv is None:
        argv = sys.argv[1:]

    main_args, command_name, sub_args = split_main_and_subcommand(argv)
    verbose = False

    try:
        config = Config.load(default_start_dir())
        output = ConsoleOutput(color=config.defaults.color)

        commands = discover_commands()
        parser = create_parser(commands)
        parsed = parse_options(main_args, parser, output)
        if parsed is None:
            return 0

        if parsed.options.version:
            output.write_line(f"{PROG} {__version__}")
            return 0

        verbose = parsed.options.verbose or config.defaults.verbose
        if verbose:
            enable_verbose("DEBUG")

        if command_name is None:
            output.write_line(parser.format_help().rstrip("\n"))
            return 0

        command = commands.get(command_name)
        if command is None:
            raise MachineToolsError(
                f"Unknown command '{command_name}'",
                suggestions=[f"Available commands: {', '.join(commands)}"],
            )

        logger.debug("Dispatching '%s' with arguments %r", command_name, sub_args)
        env = Environment(config=config)
        return command.run(sub_args, env, output)

    except MachineToolsError as e:
        print_error(e, verbose=verbose)
        return 1


if __name__ == "__main__":
    sys.exit(main())
