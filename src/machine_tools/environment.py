"""
Machine environment: the project a command runs against.

Defines the interface the target resolver reads from, and the default
implementation backed by a Machinefile.toml and a JSON state file.

A project looks like::

    project/
        Machinefile.toml
        .machine-tools/
            machines.json      # active machines, created by `up`

Machinefile.toml::

    [defaults]
    provider = "docker"

    [machines.web]
    primary = true
    box = "ubuntu/jammy64"

    [machines.db]

Machines are listed in the order their tables appear in the file.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from machine_tools.config import Config, default_start_dir, find_project_file, load_toml_file
from machine_tools.exceptions import (
    ActiveMachineProviderConflict,
    ConfigurationError,
    EnvironmentNotInitialized,
)
from machine_tools.models import ActiveMachine, MachineHandle

logger = logging.getLogger(__name__)

__all__ = ["MachineEnvironment", "Environment", "STATE_DIRNAME", "STATE_FILENAME"]

STATE_DIRNAME = ".machine-tools"
STATE_FILENAME = "machines.json"


@runtime_checkable
class MachineEnvironment(Protocol):
    """Protocol for the environment the target resolver reads from.

    Implementations own the machine handles; the resolver only asks for them.
    """

    def has_root_context(self) -> bool:
        """Whether a project root was found."""
        ...

    def machine_names(self) -> list[str]:
        """Configured machine names in configuration order."""
        ...

    def active_machines(self) -> list[ActiveMachine]:
        """Machines currently active, in the order they were recorded."""
        ...

    def default_provider(self) -> str:
        """Provider for machines that are neither active nor given one explicitly."""
        ...

    def primary_machine(self, provider: str | None) -> MachineHandle | None:
        """The designated primary machine, or None if there is none."""
        ...

    def machine(self, name: str, provider: str) -> MachineHandle | None:
        """A handle for ``name`` backed by ``provider``, or None if not configured."""
        ...


class Environment:
    """
    Project environment loaded from the nearest Machinefile.toml.

    Args:
        cwd: Directory to start searching from (default: MACHINE_TOOLS_CWD or cwd)
        config: Preloaded configuration (default: loaded from ``cwd``)

    Example::

        env = Environment()
        if env.has_root_context():
            for name in env.machine_names():
                print(name)
    """

    def __init__(self, cwd: Path | None = None, config: Config | None = None):
        self.cwd = Path(cwd) if cwd is not None else default_start_dir()
        self.config = config if config is not None else Config.load(self.cwd)
        self.machinefile = find_project_file(self.cwd)
        self.root_path = self.machinefile.parent if self.machinefile else None
        self._machines = self._load_machines() if self.machinefile else {}

    # -- MachineEnvironment --------------------------------------------------

    def has_root_context(self) -> bool:
        return self.root_path is not None

    def machine_names(self) -> list[str]:
        return list(self._machines)

    def active_machines(self) -> list[ActiveMachine]:
        state_file = self.state_file
        if state_file is None or not state_file.exists():
            return []

        try:
            data = json.loads(state_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                "Active machine state file is corrupt",
                context={"file": str(state_file), "reason": str(e)},
                suggestions=[f"Delete {state_file} and bring the machines up again"],
            ) from e

        if not isinstance(data, list):
            raise ConfigurationError(
                "Active machine state must be a list", context={"file": str(state_file)}
            )

        active = []
        for entry in data:
            try:
                active.append(ActiveMachine(str(entry["name"]), str(entry["provider"])))
            except (KeyError, TypeError) as e:
                raise ConfigurationError(
                    "Invalid active machine entry",
                    context={"file": str(state_file), "entry": repr(entry)},
                ) from e
        return active

    def default_provider(self) -> str:
        return self.config.default_provider()

    def primary_machine(self, provider: str | None = None) -> MachineHandle | None:
        name = self.primary_machine_name()
        if name is None:
            return None

        if provider is None:
            provider = self.active_provider(name) or self.default_provider()
        return self.machine(name, provider)

    def machine(self, name: str, provider: str) -> MachineHandle | None:
        settings = self._machines.get(name)
        if settings is None:
            return None
        return MachineHandle(name=name, provider=provider, settings=dict(settings))

    # -- Helpers ---------------------------------------------------------------

    @property
    def state_file(self) -> Path | None:
        """Path of the active machine state file, if there is a project."""
        if self.root_path is None:
            return None
        return self.root_path / STATE_DIRNAME / STATE_FILENAME

    def primary_machine_name(self) -> str | None:
        """Name of the machine flagged primary, or the only configured machine."""
        for name, settings in self._machines.items():
            if settings.get("primary"):
                return name
        if len(self._machines) == 1:
            return next(iter(self._machines))
        return None

    def active_provider(self, name: str) -> str | None:
        """Provider the machine is active with, or None if it is not active."""
        for active in self.active_machines():
            if active.name == name:
                return active.provider
        return None

    def is_active(self, machine: MachineHandle) -> bool:
        return self.active_provider(machine.name) == machine.provider

    def activate(self, name: str, provider: str) -> None:
        """
        Record a machine as active with ``provider``.

        Raises:
            EnvironmentNotInitialized: No project root
            ActiveMachineProviderConflict: Already active with another provider
        """
        if self.root_path is None:
            raise EnvironmentNotInitialized(str(self.cwd))

        active = self.active_machines()
        for record in active:
            if record.name == name:
                if record.provider != provider:
                    raise ActiveMachineProviderConflict(name, record.provider, provider)
                return

        active.append(ActiveMachine(name, provider))
        self._write_state(active)
        logger.info("Recorded %s as active with provider %s", name, provider)

    def deactivate(self, name: str) -> bool:
        """
        Remove a machine from the active state.

        Returns:
            True if the machine was active
        """
        if self.root_path is None:
            raise EnvironmentNotInitialized(str(self.cwd))

        active = self.active_machines()
        remaining = [record for record in active if record.name != name]
        if len(remaining) == len(active):
            return False

        self._write_state(remaining)
        logger.info("Removed %s from active machines", name)
        return True

    def _write_state(self, active: list[ActiveMachine]) -> None:
        state_file = self.state_file
        state_file.parent.mkdir(parents=True, exist_ok=True)
        state_file.write_text(
            json.dumps([record.to_dict() for record in active], indent=2) + "\n",
            encoding="utf-8",
        )

    def _load_machines(self) -> dict[str, dict[str, Any]]:
        """Read machine tables from the Machinefile, keeping file order."""
        data = load_toml_file(self.machinefile)
        machines = data.get("machines", {})
        if not isinstance(machines, dict):
            raise ConfigurationError(
                "The 'machines' entry must be a table of machine tables",
                context={"file": str(self.machinefile)},
            )

        for name, settings in machines.items():
            if not isinstance(settings, dict):
                raise ConfigurationError(
                    f"Machine '{name}' must be a table",
                    context={"file": str(self.machinefile)},
                    suggestions=[f"Write it as [machines.{name}]"],
                )

        logger.debug("Loaded %d machine(s) from %s", len(machines), self.machinefile)
        return machines
