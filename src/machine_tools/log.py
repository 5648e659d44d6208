"""
Logging configuration for machine-tools.

The package logger is silent by default; the CLI's ``--verbose`` flag (or
``verbose = true`` in the config) turns on console output.
"""

import logging

_logger = logging.getLogger("machine_tools")
_logger.addHandler(logging.NullHandler())  # Default: no output


def enable_verbose(level: str = "DEBUG", format: str | None = None) -> None:
    """Enable verbose logging to stderr.

    Args:
        level: Logging level - "DEBUG", "INFO", "WARNING", "ERROR"
        format: Optional custom format string

    Example:
        enable_verbose("INFO")
        resolve_targets(["web"], None, env)  # Logs provider choices
        disable_verbose()
    """
    _logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    for handler in _logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            _logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(getattr(logging, level.upper()))

    if format is None:
        format = "[%(levelname)s] %(message)s"

    handler.setFormatter(logging.Formatter(format))
    _logger.addHandler(handler)


def disable_verbose() -> None:
    """Disable verbose logging."""
    _logger.setLevel(logging.WARNING)
    for handler in _logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            _logger.removeHandler(handler)
