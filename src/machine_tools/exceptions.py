"""
Custom exception hierarchy for machine-tools.

Provides consistent error handling with context, suggestions, and actionable guidance.
All exceptions include:
- Context information (machine names, providers, patterns, etc.)
- Suggestions for how to fix the issue
- Clear, formatted error messages

Every error here is terminal for the current command invocation. They are
raised by the resolver and the option parser and propagate unchanged to the
CLI entry point, which prints them and exits with a non-zero status.

Example::

    from machine_tools.exceptions import MachineNotFound

    raise MachineNotFound("web")
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class MachineToolsError(Exception):
    """
    Base exception for all machine-tools errors.

    Provides consistent formatting with context and suggestions.

    Attributes:
        context: Dictionary of contextual information (machine, provider, etc.)
        suggestions: List of actionable suggestions for fixing the error
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
    ):
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context and suggestions."""
        parts = [self.message]

        if self.context:
            parts.append("\n\nContext:")
            for key, value in self.context.items():
                parts.append(f"\n  {key}: {value}")

        if self.suggestions:
            parts.append("\n\nSuggestions:")
            for suggestion in self.suggestions:
                parts.append(f"\n  - {suggestion}")

        return "".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class EnvironmentNotInitialized(MachineToolsError):
    """
    No project root was found for the current directory.

    Raised before any machine lookup when a command needs a project
    (a directory containing a Machinefile.toml).
    """

    def __init__(self, start_dir: Optional[str] = None):
        context = {"searched_from": start_dir} if start_dir else None
        super().__init__(
            "A machine-tools environment is required to run this command",
            context=context,
            suggestions=[
                "Run the command from a directory containing Machinefile.toml",
                "Set MACHINE_TOOLS_CWD to the project directory",
            ],
        )


class ActiveMachineProviderConflict(MachineToolsError):
    """
    A provider was requested that differs from an active machine's provider.

    A machine that is already active stays with the provider it was brought
    up with until it is destroyed.

    Attributes:
        name: The machine name
        active_provider: Provider the machine is currently active with
        requested_provider: Provider that was asked for
    """

    def __init__(self, name: str, active_provider: str, requested_provider: str):
        self.name = name
        self.active_provider = active_provider
        self.requested_provider = requested_provider
        super().__init__(
            f"Machine '{name}' is already active with a different provider",
            context={
                "machine": name,
                "active_provider": active_provider,
                "requested_provider": requested_provider,
            },
            suggestions=[
                f"Run the command again with '--provider {active_provider}'",
                f"Destroy '{name}' first to switch it to '{requested_provider}'",
            ],
        )


class MachineNotFound(MachineToolsError):
    """A literal machine name does not match any configured machine."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            f"The machine with the name '{name}' was not found in the configuration",
            context={"machine": name},
            suggestions=["Run 'machine-tools status' to list configured machines"],
        )


class NoRegexMatch(MachineToolsError):
    """A /pattern/ name matched none of the configured machines."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        super().__init__(
            "No machines matched the regular expression given",
            context={"pattern": pattern},
        )


class InvalidPattern(MachineToolsError):
    """A /pattern/ name does not contain a valid regular expression."""

    def __init__(self, pattern: str, reason: str = ""):
        self.pattern = pattern
        context = {"pattern": pattern}
        if reason:
            context["reason"] = reason
        super().__init__("Invalid regular expression in machine name", context=context)


class MultipleTargetsNotAllowed(MachineToolsError):
    """A single target is required but no primary machine could be chosen."""

    def __init__(self):
        super().__init__(
            "This command only works with one machine at a time",
            suggestions=[
                "Specify exactly one machine name",
                "Mark a machine with 'primary = true' in Machinefile.toml",
            ],
        )


class CLIInvalidOptions(MachineToolsError):
    """
    Command-line options could not be parsed.

    Attributes:
        help: Full help text of the command that rejected the options
    """

    def __init__(self, help: str, reason: str = ""):
        self.help = help
        self.reason = reason
        message = "An invalid option was specified. The help for this command"
        message += " is available below.\n\n" + help
        context = {"reason": reason} if reason else None
        super().__init__(message, context=context)


class ConfigurationError(MachineToolsError):
    """
    Configuration or settings error.

    Raised when a Machinefile, user config or state file is invalid.

    Example::

        raise ConfigurationError(
            "Invalid TOML",
            context={"file": "Machinefile.toml"},
            suggestions=["Check the file with a TOML validator"]
        )
    """

    pass


__all__ = [
    "MachineToolsError",
    "EnvironmentNotInitialized",
    "ActiveMachineProviderConflict",
    "MachineNotFound",
    "NoRegexMatch",
    "InvalidPattern",
    "MultipleTargetsNotAllowed",
    "CLIInvalidOptions",
    "ConfigurationError",
]
