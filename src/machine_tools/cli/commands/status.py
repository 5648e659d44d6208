"""Show the state of machines."""

import argparse

from machine_tools.cli.command_protocol import command_parser
from machine_tools.cli.options import parse_options
from machine_tools.models import ResolutionOptions
from machine_tools.targets import resolve_targets


class StatusCommand:
    """Print the state of each target machine."""

    name = "status"
    help = "Show the state of machines"

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--provider", help="Provider to look the machines up with")

    @staticmethod
    def run(argv, env, output) -> int:
        parsed = parse_options(argv, command_parser(StatusCommand), output)
        if parsed is None:
            return 0

        machines = resolve_targets(
            parsed.args, ResolutionOptions(provider=parsed.options.provider), env
        )
        if not machines:
            output.write_line("No machines are configured.")
            return 0

        width = max(len(machine.name) for machine in machines) + 2

        output.write_line("Current machine states:")
        output.write_line("")
        for machine in machines:
            state = "active" if env.is_active(machine) else "not created"
            output.write_line(f"{machine.name:<{width}}{state} ({machine.provider})")
        return 0
