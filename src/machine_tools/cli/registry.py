"""Command registry for machine-tools CLI.

Provides auto-discovery of command classes implementing the Command
protocol in the ``machine_tools.cli.commands`` package.

Usage:
    from machine_tools.cli.registry import discover_commands

    commands = discover_commands()
    commands["status"].run(["web"], env, output)
"""

import importlib
import pkgutil
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from machine_tools.cli.command_protocol import Command

# Registry of command classes.
# Populated by discover_commands() at startup.
_registry: dict[str, type["Command"]] = {}


def discover_commands() -> dict[str, type["Command"]]:
    """Discover command classes in the commands subpackage.

    Scans machine_tools.cli.commands for modules that export a class
    implementing the Command protocol (has name, help, add_arguments, run).

    Returns:
        Dict mapping command names to command classes, sorted by name.
    """
    from machine_tools.cli.command_protocol import Command

    import machine_tools.cli.commands as pkg

    commands: dict[str, type[Command]] = {}

    for _importer, modname, _ispkg in pkgutil.iter_modules(pkg.__path__):
        if modname.startswith("_"):
            continue
        module = importlib.import_module(f"machine_tools.cli.commands.{modname}")

        # Look for a class named *Command (e.g., StatusCommand)
        for attr_name in dir(module):
            obj = getattr(module, attr_name)
            if (
                isinstance(obj, type)
                and obj is not Command
                and attr_name.endswith("Command")
                and hasattr(obj, "name")
                and hasattr(obj, "help")
                and hasattr(obj, "add_arguments")
                and hasattr(obj, "run")
            ):
                commands[obj.name] = obj

    global _registry
    _registry = dict(sorted(commands.items()))
    return _registry


def get_registry() -> dict[str, type["Command"]]:
    """Return the current command registry.

    Returns:
        Dict mapping command names to command classes.
    """
    return _registry
