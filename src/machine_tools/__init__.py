"""
machine-tools: manage named machines backed by pluggable providers.

This package resolves the machine names given on the command line into
provider-backed machine handles and provides the CLI built on top of that.

Modules:
    targets: Resolve names and /regex/ patterns into ordered machine handles
    environment: Project discovery, machine definitions and active state
    config: User and project configuration
    models: Machine handles and resolution options
    exceptions: Error hierarchy
    cli: Command-line interface (`machine-tools` / `mct`)

Quick Start::

    from machine_tools import Environment, ResolutionOptions, resolve_targets

    env = Environment()
    for machine in resolve_targets(["/^web/"], ResolutionOptions(), env):
        print(machine.name, machine.provider)
"""

__version__ = "0.1.0"

from machine_tools import log as _log  # noqa: F401  (installs the NullHandler)
from machine_tools.environment import Environment, MachineEnvironment
from machine_tools.models import ActiveMachine, ArgvSplit, MachineHandle, ResolutionOptions
from machine_tools.targets import resolve_targets

__all__ = [
    # Version
    "__version__",
    # Environment
    "Environment",
    "MachineEnvironment",
    # Models
    "ActiveMachine",
    "ArgvSplit",
    "MachineHandle",
    "ResolutionOptions",
    # Resolution
    "resolve_targets",
]
