"""Show the machine single-target commands act on."""

import argparse

from machine_tools.cli.command_protocol import command_parser
from machine_tools.cli.options import parse_options
from machine_tools.models import ResolutionOptions
from machine_tools.targets import resolve_targets


class PrimaryCommand:
    """Resolve exactly one target, falling back to the primary machine."""

    name = "primary"
    help = "Show the machine a single-target command would use"

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.add_argument("--provider", help="Provider to look the machine up with")

    @staticmethod
    def run(argv, env, output) -> int:
        parsed = parse_options(
            argv, command_parser(PrimaryCommand, "[options] [name|/regex/]"), output
        )
        if parsed is None:
            return 0

        options = ResolutionOptions(provider=parsed.options.provider, single_target=True)
        (machine,) = resolve_targets(parsed.args, options, env)
        output.write_line(str(machine))
        return 0
