"""Destroy machines."""

import argparse

from machine_tools.cli.command_protocol import command_parser
from machine_tools.cli.options import parse_options
from machine_tools.models import ResolutionOptions
from machine_tools.targets import resolve_targets


class DestroyCommand:
    """Forget the active state of each target, last configured machine first."""

    name = "destroy"
    help = "Stop and delete all traces of machines"

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "-f", "--force", action="store_true", help="Destroy without confirmation"
        )

    @staticmethod
    def run(argv, env, output) -> int:
        parsed = parse_options(argv, command_parser(DestroyCommand), output)
        if parsed is None:
            return 0

        machines = resolve_targets(parsed.args, ResolutionOptions(reverse=True), env)

        if not parsed.options.force:
            output.write_line("The following machines would be destroyed:")
            for machine in machines:
                output.write_line(f"  {machine}")
            output.write_line("Run the command again with --force to destroy them.")
            return 1

        for machine in machines:
            if env.deactivate(machine.name):
                output.write_line(f"==> {machine.name}: Destroying machine...")
            else:
                output.write_line(f"==> {machine.name}: Machine not created. Skipping.")
        return 0
