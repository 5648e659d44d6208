"""Splitting of argv for nested command dispatch."""

from __future__ import annotations

from typing import Sequence

from machine_tools.models import ArgvSplit

__all__ = ["split_main_and_subcommand"]


def split_main_and_subcommand(argv: Sequence[str]) -> ArgvSplit:
    """
    Split argv into the flags to this command, the subcommand, and the flags
    to the subcommand. For example::

        -v status -h -v

    yields ``(["-v"], "status", ["-h", "-v"])``. The first part is given to
    the current command, the second names the subcommand and the third is
    passed on to it unchanged.

    Args:
        argv: Arguments to split (not modified)

    Returns:
        ArgvSplit of main args, subcommand (None if there is none) and sub args
    """
    for i, arg in enumerate(argv):
        if not arg.startswith("-"):
            return ArgvSplit(list(argv[:i]), arg, list(argv[i + 1 :]))

    # argv was empty or contained only flags
    return ArgvSplit(list(argv), None, [])
