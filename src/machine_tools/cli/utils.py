"""Error reporting for the command line."""

from __future__ import annotations

from typing import TYPE_CHECKING

from machine_tools.exceptions import MachineToolsError

if TYPE_CHECKING:
    from rich.console import Console
    from rich.text import Text

__all__ = ["render_error", "print_error", "get_error_console"]

_error_console: Console | None = None


def get_error_console() -> Console:
    """Rich console on stderr, created on first use."""
    global _error_console
    if _error_console is None:
        from rich.console import Console

        _error_console = Console(stderr=True, highlight=False)
    return _error_console


def render_error(e: Exception) -> Text:
    """
    Build the styled error report for an exception.

    Machine-tools errors show their message followed by the "Context:" and
    "Suggestions:" sections; anything else shows its type and message.
    Styles are dropped by the console when stderr is not a terminal.
    """
    from rich.text import Text

    text = Text()
    text.append("Error: ", style="bold red")
    if not isinstance(e, MachineToolsError):
        text.append(f"{type(e).__name__}: {e}")
        return text

    text.append(e.message)
    if e.context:
        text.append("\n\nContext:", style="bold")
        for key, value in e.context.items():
            text.append(f"\n  {key}: ", style="cyan")
            text.append(str(value))
    if e.suggestions:
        text.append("\n\nSuggestions:", style="bold")
        for suggestion in e.suggestions:
            text.append("\n  - ", style="yellow")
            text.append(suggestion)
    return text


def print_error(e: Exception, verbose: bool = False) -> None:
    """
    Print an exception to stderr.

    Args:
        e: The exception to print
        verbose: Also print the traceback (only meaningful inside ``except``)
    """
    console = get_error_console()
    if verbose:
        console.print_exception()
    console.print(render_error(e), soft_wrap=True)
