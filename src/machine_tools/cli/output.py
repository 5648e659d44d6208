"""Console output collaborator for commands.

Commands and the option parser write user-facing text through an object with
a ``write_line`` method, so tests and embedding code can capture it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from rich.console import Console

__all__ = ["Output", "ConsoleOutput", "BufferOutput"]


@runtime_checkable
class Output(Protocol):
    """Anything that can write a line of text for the user."""

    def write_line(self, text: str) -> None: ...


class ConsoleOutput:
    """Writes lines to stdout (or stderr) through a Rich console.

    Text is printed verbatim. Markup, emoji codes and highlighting are not
    interpreted and lines are not re-wrapped, so help text keeps the layout
    argparse gave it.
    """

    def __init__(self, console: Console | None = None, stderr: bool = False, color: bool = True):
        if console is None:
            from rich.console import Console

            console = Console(stderr=stderr, no_color=not color, highlight=False, emoji=False)
        self.console = console

    def write_line(self, text: str = "") -> None:
        self.console.print(text, markup=False, emoji=False, highlight=False, soft_wrap=True)


class BufferOutput:
    """Collects lines in memory."""

    def __init__(self):
        self.lines: list[str] = []

    def write_line(self, text: str = "") -> None:
        self.lines.extend(text.splitlines() or [""])

    @property
    def text(self) -> str:
        return "\n".join(self.lines)
