"""Pytest fixtures for machine-tools tests."""

from pathlib import Path

import pytest

from machine_tools.models import ActiveMachine, MachineHandle

MACHINEFILE = """\
[defaults]
provider = "docker"

[machines.web1]
primary = true
box = "ubuntu/jammy64"

[machines.web2]

[machines.db]
"""


class FakeEnvironment:
    """In-memory MachineEnvironment for resolver tests."""

    def __init__(
        self,
        names=("web1", "web2", "db"),
        active=(),
        default="virtualbox",
        primary=None,
        root=True,
    ):
        self.names = list(names)
        self.active = [ActiveMachine(name, provider) for name, provider in active]
        self.default = default
        self.primary = primary
        self.root = root
        self.primary_calls = []
        self.active_reads = 0

    def has_root_context(self):
        return self.root

    def machine_names(self):
        return list(self.names)

    def active_machines(self):
        self.active_reads += 1
        return list(self.active)

    def default_provider(self):
        return self.default

    def primary_machine(self, provider):
        self.primary_calls.append(provider)
        if self.primary is None:
            return None
        return MachineHandle(self.primary, provider or self.default)

    def machine(self, name, provider):
        if name not in self.names:
            return None
        return MachineHandle(name, provider)


@pytest.fixture
def fake_env():
    """Environment with web1, web2 and db configured and nothing active."""
    return FakeEnvironment()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from the real user config and environment variables."""
    user_config = tmp_path / "home" / ".config" / "machine-tools" / "config.toml"
    monkeypatch.setattr("machine_tools.config.USER_CONFIG_PATH", user_config)
    monkeypatch.setattr("machine_tools.cli.commands.config.USER_CONFIG_PATH", user_config)
    monkeypatch.delenv("MACHINE_TOOLS_CWD", raising=False)
    monkeypatch.delenv("MACHINE_TOOLS_DEFAULT_PROVIDER", raising=False)
    return user_config


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A project directory containing a Machinefile with three machines."""
    project = tmp_path / "project"
    project.mkdir()
    (project / ".git").mkdir()
    (project / "Machinefile.toml").write_text(MACHINEFILE)
    return project


@pytest.fixture
def make_env():
    """Factory for FakeEnvironment instances."""
    return FakeEnvironment
