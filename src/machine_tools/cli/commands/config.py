"""
Config command for machine-tools CLI.

Provides subcommands to view and initialize configuration.

Usage:
    mct config show              Show effective configuration with sources
    mct config paths             Show config file paths
    mct config get <key>         Get a specific config value
    mct config init [--user]     Create a Machinefile (or user config with --user)
"""

import argparse
from pathlib import Path

from machine_tools.cli.argv import split_main_and_subcommand
from machine_tools.cli.command_protocol import PROG, command_parser
from machine_tools.cli.options import parse_options
from machine_tools.config import (
    PROJECT_FILENAMES,
    USER_CONFIG_PATH,
    generate_machinefile,
    generate_template,
    get_config_paths,
)
from machine_tools.exceptions import CLIInvalidOptions

SUBCOMMANDS = {
    "show": "Show effective configuration with sources",
    "paths": "Show config file paths",
    "get": "Print a single config value (e.g. defaults.provider)",
    "init": "Create a Machinefile.toml here, or the user config with --user",
}


class ConfigCommand:
    """View and manage machine-tools configuration."""

    name = "config"
    help = "View and manage configuration"

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser) -> None:
        parser.formatter_class = argparse.RawDescriptionHelpFormatter
        parser.epilog = "subcommands:\n" + "\n".join(
            f"  {name:<8}{text}" for name, text in SUBCOMMANDS.items()
        )

    @staticmethod
    def run(argv, env, output) -> int:
        main_args, subcommand, sub_args = split_main_and_subcommand(argv)

        parser = command_parser(ConfigCommand, "<subcommand> [options]")
        if parse_options(main_args, parser, output) is None:
            return 0

        if subcommand is None or subcommand == "show":
            if subcommand and parse_options(sub_args, _sub_parser("show"), output) is None:
                return 0
            return _show_config(env, output)
        if subcommand == "paths":
            if parse_options(sub_args, _sub_parser("paths"), output) is None:
                return 0
            return _show_paths(output)
        if subcommand == "get":
            sub = _sub_parser("get", "<key>")
            sub.add_argument("key", help="Config key (e.g., defaults.provider)")
            parsed = parse_options(sub_args, sub, output)
            if parsed is None:
                return 0
            return _get_config(env, parsed.options.key, output)
        if subcommand == "init":
            sub = _sub_parser("init", "[--user]")
            sub.add_argument(
                "--user",
                action="store_true",
                help=f"Write the user config ({USER_CONFIG_PATH})",
            )
            parsed = parse_options(sub_args, sub, output)
            if parsed is None:
                return 0
            return _init_config(env, parsed.options.user, output)

        raise CLIInvalidOptions(
            help=parser.format_help().rstrip("\n"),
            reason=f"unknown subcommand '{subcommand}'",
        )


def _sub_parser(name: str, usage_args: str = "") -> argparse.ArgumentParser:
    return argparse.ArgumentParser(
        prog=f"{PROG} config {name}",
        usage=f"{PROG} config {name} {usage_args}".rstrip(),
        description=SUBCOMMANDS[name],
        add_help=False,
    )


def _show_config(env, output) -> int:
    """Show effective configuration with sources."""
    config = env.config

    output.write_line("# Effective machine-tools configuration")
    output.write_line("")
    output.write_line("[defaults]")
    for key in ("provider", "verbose", "color"):
        value = getattr(config.defaults, key)
        output.write_line(_format_value(key, value, config.get_source(f"defaults.{key}")))
    output.write_line("")
    output.write_line(f"# default provider in effect: {config.default_provider()}")
    return 0


def _format_value(key: str, value, source: str) -> str:
    """Format a config value with its source."""
    if isinstance(value, str):
        formatted = f'"{value}"'
    elif isinstance(value, bool):
        formatted = "true" if value else "false"
    elif value is None:
        formatted = "# not set"
    else:
        formatted = str(value)

    source_display = Path(source).name if source != "default" else source
    return f"{key} = {formatted}  # from: {source_display}"


def _show_paths(output) -> int:
    """Show config file paths."""
    paths = get_config_paths()

    output.write_line("Config file paths:")
    output.write_line("")
    output.write_line(f"User config: {USER_CONFIG_PATH}")
    output.write_line("  Status: exists" if paths["user"] else "  Status: not found")
    output.write_line("")
    output.write_line(f"Project file search: {', '.join(PROJECT_FILENAMES)}")
    if paths["project"]:
        output.write_line(f"  Found: {paths['project']}")
    else:
        output.write_line("  Status: not found")
    return 0


def _get_config(env, key: str, output) -> int:
    """Print a specific config value."""
    section, _, attr = key.partition(".")
    section_obj = getattr(env.config, section, None)
    if not attr or section_obj is None or section.startswith("_") or not hasattr(section_obj, attr):
        output.write_line(f"Unknown config key '{key}'. Use 'section.key', e.g. defaults.provider.")
        return 1

    value = getattr(section_obj, attr)
    if value is None:
        output.write_line("# not set")
    elif isinstance(value, bool):
        output.write_line("true" if value else "false")
    else:
        output.write_line(str(value))
    return 0


def _init_config(env, user: bool, output) -> int:
    """Create a template config file or Machinefile."""
    if user:
        target = USER_CONFIG_PATH
        content = generate_template()
    else:
        target = Path(env.cwd) / PROJECT_FILENAMES[0]
        content = generate_machinefile()

    if target.exists():
        output.write_line(f"Config file already exists: {target}")
        output.write_line("Remove it first or edit manually.")
        return 1

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    output.write_line(f"Created {target}")
    return 0
