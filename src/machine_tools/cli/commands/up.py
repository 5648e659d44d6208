"""Bring machines up."""

import argparse

from machine_tools.cli.command_protocol import command_parser
from machine_tools.cli.options import parse_options
from machine_tools.models import ResolutionOptions
from machine_tools.targets import resolve_targets


class UpCommand:
    """Record each target machine as active with its provider."""

    name = "up"
    help = "Bring machines up"

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--provider", help="Back the machines with this provider")

    @staticmethod
    def run(argv, env, output) -> int:
        parsed = parse_options(argv, command_parser(UpCommand), output)
        if parsed is None:
            return 0

        options = ResolutionOptions(provider=parsed.options.provider)
        for machine in resolve_targets(parsed.args, options, env):
            output.write_line(
                f"Bringing machine '{machine.name}' up with '{machine.provider}' provider..."
            )
            env.activate(machine.name, machine.provider)
        return 0
