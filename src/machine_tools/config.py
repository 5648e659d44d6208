"""
Configuration file support for machine-tools.

Provides hierarchical configuration loading from:
1. Project config: the [defaults] table of Machinefile.toml in the project root
2. User config: ~/.config/machine-tools/config.toml

Environment variables and CLI arguments override config file values, and
project config overrides user config.
"""

import os
import sys
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from machine_tools.exceptions import ConfigurationError

# Project file names to search for, in order of preference
PROJECT_FILENAMES = ["Machinefile.toml", ".Machinefile.toml"]

# User-level config path
USER_CONFIG_PATH = Path.home() / ".config" / "machine-tools" / "config.toml"

# Environment variable overrides
ENV_CWD = "MACHINE_TOOLS_CWD"
ENV_DEFAULT_PROVIDER = "MACHINE_TOOLS_DEFAULT_PROVIDER"

# Provider used when nothing else picks one
FALLBACK_PROVIDER = "virtualbox"

# All known config keys for validation
KNOWN_KEYS = {
    "defaults": {"provider", "verbose", "color"},
}

# Top-level tables that belong to the project file but not to the config
PROJECT_ONLY_KEYS = {"machines"}


@dataclass
class DefaultsConfig:
    """Default options for CLI commands."""

    provider: str | None = None
    verbose: bool = False
    color: bool = True


@dataclass
class Config:
    """Merged configuration from all sources."""

    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    # Track which file each setting came from (for `config show`)
    _sources: dict = field(default_factory=dict, repr=False)

    @classmethod
    def load(cls, start_dir: Path | None = None) -> "Config":
        """
        Load configuration with precedence: project > user > defaults.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Merged configuration object
        """
        if start_dir is None:
            start_dir = default_start_dir()

        config = cls()
        sources: dict[str, str] = {}

        # Load user config first (lower precedence)
        if USER_CONFIG_PATH.exists():
            user_data = load_toml_file(USER_CONFIG_PATH)
            if user_data:
                _merge_config(config, user_data, str(USER_CONFIG_PATH), sources)

        # Load project config (higher precedence)
        project_file = find_project_file(start_dir)
        if project_file:
            project_data = load_toml_file(project_file)
            if project_data:
                _merge_config(
                    config, project_data, str(project_file), sources, project=True
                )

        config._sources = sources
        return config

    def get_source(self, key: str) -> str:
        """Get the source file for a config key."""
        return self._sources.get(key, "default")

    def default_provider(self) -> str:
        """Provider to use when none is requested and the machine is not active."""
        return os.environ.get(ENV_DEFAULT_PROVIDER) or self.defaults.provider or FALLBACK_PROVIDER


def default_start_dir() -> Path:
    """Directory project discovery starts from (MACHINE_TOOLS_CWD or cwd)."""
    override = os.environ.get(ENV_CWD)
    return Path(override) if override else Path.cwd()


def find_project_file(start_dir: Path) -> Path | None:
    """
    Find the Machinefile by walking up the directory tree.

    Stops at .git directory or filesystem root.

    Args:
        start_dir: Directory to start searching from

    Returns:
        Path to the Machinefile if found, None otherwise
    """
    current = Path(start_dir).resolve()

    while True:
        for filename in PROJECT_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                return candidate

        # Stop at .git directory (repository root)
        if (current / ".git").exists():
            break

        # Stop at filesystem root
        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def load_toml_file(path: Path) -> dict[str, Any]:
    """
    Load a TOML file.

    Args:
        path: Path to TOML file

    Returns:
        Parsed TOML data

    Raises:
        ConfigurationError: If the file cannot be read or is invalid TOML
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            f"Invalid TOML in {path}",
            context={"file": str(path), "reason": str(e)},
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read config file {path}",
            context={"file": str(path), "reason": str(e)},
        ) from e


def _merge_config(
    config: Config,
    data: dict[str, Any],
    source: str,
    sources: dict[str, str],
    project: bool = False,
) -> None:
    """
    Merge loaded config data into Config object.

    Args:
        config: Config object to update
        data: Raw config data from TOML
        source: Source file path (for tracking)
        sources: Dict to update with source info
        project: True when ``data`` comes from a Machinefile
    """
    # Warn about unknown top-level keys
    for key in data:
        if key in KNOWN_KEYS or (project and key in PROJECT_ONLY_KEYS):
            continue
        warnings.warn(f"Unknown config key '{key}' in {source}", stacklevel=3)

    if "defaults" in data:
        defaults_data = data["defaults"]
        if not isinstance(defaults_data, dict):
            raise ConfigurationError(
                "The [defaults] entry must be a table", context={"file": source}
            )
        _warn_unknown_keys(defaults_data, KNOWN_KEYS["defaults"], "defaults", source)

        if "provider" in defaults_data:
            config.defaults.provider = _expect(defaults_data, "provider", str, source)
            sources["defaults.provider"] = source
        if "verbose" in defaults_data:
            config.defaults.verbose = _expect(defaults_data, "verbose", bool, source)
            sources["defaults.verbose"] = source
        if "color" in defaults_data:
            config.defaults.color = _expect(defaults_data, "color", bool, source)
            sources["defaults.color"] = source


def _expect(data: dict[str, Any], key: str, kind: type, source: str) -> Any:
    """Return ``data[key]`` if it has the expected type."""
    value = data[key]
    if not isinstance(value, kind):
        raise ConfigurationError(
            f"Config key 'defaults.{key}' must be of type {kind.__name__}",
            context={"file": source, "value": repr(value)},
        )
    return value


def _warn_unknown_keys(data: dict[str, Any], known: set[str], section: str, source: str) -> None:
    """Warn about unknown keys in a config section."""
    for key in data:
        if key not in known:
            warnings.warn(f"Unknown config key '{section}.{key}' in {source}", stacklevel=4)


def generate_template() -> str:
    """
    Generate a template config file with all options documented.

    Returns:
        Template TOML string
    """
    return """# machine-tools configuration file
# Place in ~/.config/machine-tools/config.toml for user defaults, or put a
# [defaults] table in your project's Machinefile.toml

[defaults]
# Provider used for machines that are not active and have no --provider
# (MACHINE_TOOLS_DEFAULT_PROVIDER overrides this)
# provider = "virtualbox"

# Enable verbose output by default
# verbose = false

# Use colors in console output
# color = true
"""


def generate_machinefile(name: str = "default") -> str:
    """Generate a starter Machinefile.toml defining a single machine."""
    return f"""# machine-tools project file
# Machines are targeted in the order they appear below.

[defaults]
# provider = "virtualbox"

[machines.{name}]
primary = true
"""


def get_config_paths() -> dict[str, Path | None]:
    """
    Get paths to config files that would be loaded.

    Returns:
        Dict with 'user' and 'project' keys
    """
    project_file = find_project_file(default_start_dir())

    return {
        "user": USER_CONFIG_PATH if USER_CONFIG_PATH.exists() else None,
        "project": project_file,
    }
