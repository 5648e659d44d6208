"""
Data models shared by the resolver, the environment and the CLI.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NamedTuple


@dataclass(frozen=True)
class ActiveMachine:
    """A machine already brought up by the environment, and its provider."""

    name: str
    provider: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "provider": self.provider}


@dataclass(frozen=True)
class MachineHandle:
    """
    A machine resolved to a concrete provider.

    Handles are created by the environment; two handles are equal when they
    name the same machine with the same provider.

    Attributes:
        name: Machine name as configured in the Machinefile
        provider: Provider backing the machine
        settings: Free-form settings table from the Machinefile
    """

    name: str
    provider: str
    settings: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __str__(self) -> str:
        return f"{self.name} ({self.provider})"


@dataclass
class ResolutionOptions:
    """
    Options controlling target resolution.

    Attributes:
        provider: Provider requested on the command line, if any
        reverse: Return targets in reverse order
        single_target: Require exactly one target (falls back to the primary machine)
    """

    provider: str | None = None
    reverse: bool = False
    single_target: bool = False


class ArgvSplit(NamedTuple):
    """Result of splitting argv into main flags, subcommand and subcommand flags."""

    main_args: list[str]
    subcommand: str | None
    sub_args: list[str]


__all__ = ["ActiveMachine", "MachineHandle", "ResolutionOptions", "ArgvSplit"]
