"""CLI commands. Each module exports one class implementing the Command protocol."""
