"""
Target machine resolution for commands.

Turns the machine names given on the command line into an ordered list of
machine handles. A name is either a literal machine name or a regular
expression wrapped in slashes (``/^web/``). With no names at all, every
configured machine is targeted in configuration order.

Provider selection for each machine:

* If a provider was explicitly requested, use it. An active machine with a
  DIFFERENT provider is an error, since a machine cannot be backed by two
  providers at once.
* Otherwise use the active machine's provider if it is active, or the
  environment's default provider.

Example::

    from machine_tools.targets import resolve_targets
    from machine_tools.models import ResolutionOptions

    for machine in resolve_targets(["/^web/"], ResolutionOptions(reverse=True), env):
        print(machine.name, machine.provider)
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Optional, Sequence, Union

from machine_tools.exceptions import (
    ActiveMachineProviderConflict,
    EnvironmentNotInitialized,
    InvalidPattern,
    MachineNotFound,
    MultipleTargetsNotAllowed,
    NoRegexMatch,
)
from machine_tools.models import ActiveMachine, MachineHandle, ResolutionOptions

if TYPE_CHECKING:
    from machine_tools.environment import MachineEnvironment

logger = logging.getLogger(__name__)

__all__ = ["resolve_targets", "provider_for", "pattern_of"]

_PATTERN_RE = re.compile(r"^/(.+?)/$", re.DOTALL)


def pattern_of(name: str) -> Optional[str]:
    """Return the regular expression inside a ``/pattern/`` name, or None."""
    match = _PATTERN_RE.match(name)
    return match.group(1) if match else None


def provider_for(
    name: str,
    options: ResolutionOptions,
    env: MachineEnvironment,
    log: logging.Logger = logger,
    active: Optional[Sequence[ActiveMachine]] = None,
) -> str:
    """
    Pick the provider to back a machine with.

    Args:
        name: Concrete machine name
        options: Resolution options (only ``provider`` is used)
        env: Environment to read active machines and the default provider from
        log: Logger for diagnostics
        active: Active machines to check (default: read from ``env``)

    Returns:
        The provider to request the machine with

    Raises:
        ActiveMachineProviderConflict: The machine is active with another provider
    """
    requested = options.provider
    if active is None:
        active = env.active_machines()

    # First active record wins; there is at most one provider per active name.
    for record in active:
        if record.name != name:
            continue
        if requested and requested != record.provider:
            raise ActiveMachineProviderConflict(name, record.provider, requested)
        log.info("Active machine found with name %s. Using provider: %s", name, record.provider)
        return record.provider

    return requested or env.default_provider()


def resolve_targets(
    names: Union[str, Sequence[str], None],
    options: Optional[ResolutionOptions],
    env: MachineEnvironment,
    log: Optional[logging.Logger] = None,
) -> list[MachineHandle]:
    """
    Resolve machine names to an ordered list of machine handles.

    Args:
        names: Machine names or ``/regex/`` patterns. Empty or None targets
            every configured machine.
        options: Provider, ordering and single-target options
        env: The machine environment
        log: Logger for diagnostics (defaults to this module's logger)

    Returns:
        Machine handles in the order requested

    Raises:
        EnvironmentNotInitialized: No project root
        ActiveMachineProviderConflict: Requested provider contradicts an active machine
        MachineNotFound: A literal name is not configured
        NoRegexMatch: A pattern matched no machine
        InvalidPattern: A pattern is not a valid regular expression
        MultipleTargetsNotAllowed: Single target required and no primary machine
    """
    log = log or logger
    options = options or ResolutionOptions()

    log.debug("Getting target machines for command. Arguments:")
    log.debug(" -- names: %r", names)
    log.debug(" -- options: %r", options)

    if not env.has_root_context():
        raise EnvironmentNotInitialized()

    # one snapshot of the active machines for the whole resolution
    active = env.active_machines()

    if names is None:
        names = []
    elif isinstance(names, str):
        names = [names]

    machines: list[MachineHandle] = []
    if names:
        for name in names:
            pattern = pattern_of(name)
            if pattern is not None:
                machines.extend(_resolve_pattern(pattern, options, env, log, active))
            else:
                log.debug("Finding machine that matches name: %s", name)
                machine = env.machine(name, provider_for(name, options, env, log, active))
                if machine is None:
                    raise MachineNotFound(name)
                machines.append(machine)
    else:
        log.debug("Loading all machines...")
        for machine_name in env.machine_names():
            provider = provider_for(machine_name, options, env, log, active)
            machine = env.machine(machine_name, provider)
            if machine is None:
                raise MachineNotFound(machine_name)
            machines.append(machine)

    if options.single_target and len(machines) != 1:
        log.debug("Using primary machine since single target")
        primary = env.primary_machine(options.provider)
        if primary is None:
            raise MultipleTargetsNotAllowed()
        machines = [primary]

    if options.reverse:
        machines.reverse()

    for machine in machines:
        log.info("With machine: %s (%s)", machine.name, machine.provider)

    return machines


def _resolve_pattern(
    pattern: str,
    options: ResolutionOptions,
    env: MachineEnvironment,
    log: logging.Logger,
    active: Sequence[ActiveMachine],
) -> list[MachineHandle]:
    """Resolve every configured machine whose name matches ``pattern``."""
    log.debug("Finding machines that match regex: %s", pattern)
    try:
        regex = re.compile(pattern)
    except re.error as e:
        raise InvalidPattern(pattern, str(e)) from e

    matched = []
    for machine_name in env.machine_names():
        if not regex.search(machine_name):
            continue
        machine = env.machine(machine_name, provider_for(machine_name, options, env, log, active))
        if machine is None:
            raise MachineNotFound(machine_name)
        matched.append(machine)

    if not matched:
        raise NoRegexMatch(pattern)
    return matched
