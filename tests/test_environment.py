"""Tests for the Machinefile-backed environment."""

import json

import pytest

from machine_tools.environment import Environment, MachineEnvironment
from machine_tools.exceptions import (
    ActiveMachineProviderConflict,
    ConfigurationError,
    EnvironmentNotInitialized,
)
from machine_tools.models import ActiveMachine, MachineHandle, ResolutionOptions
from machine_tools.targets import resolve_targets


class TestEnvironmentDiscovery:
    """Tests for project discovery."""

    def test_no_project(self, tmp_path):
        """Without a Machinefile there is no root context."""
        (tmp_path / ".git").mkdir()
        env = Environment(cwd=tmp_path)
        assert not env.has_root_context()
        assert env.machine_names() == []
        assert env.active_machines() == []
        assert env.state_file is None

    def test_project(self, project_dir):
        """A Machinefile gives a root context and machines in file order."""
        env = Environment(cwd=project_dir)
        assert env.has_root_context()
        assert env.root_path == project_dir.resolve()
        assert env.machine_names() == ["web1", "web2", "db"]

    def test_cwd_from_environment_variable(self, project_dir, monkeypatch):
        """MACHINE_TOOLS_CWD sets the start directory."""
        monkeypatch.setenv("MACHINE_TOOLS_CWD", str(project_dir))
        assert Environment().has_root_context()

    def test_satisfies_protocol(self, project_dir):
        """Environment implements the resolver's protocol."""
        assert isinstance(Environment(cwd=project_dir), MachineEnvironment)

    def test_machines_must_be_tables(self, tmp_path):
        """A non-table machine entry is a configuration error."""
        (tmp_path / ".git").mkdir()
        (tmp_path / "Machinefile.toml").write_text('machines = { web = "x" }\n')
        with pytest.raises(ConfigurationError, match="web"):
            Environment(cwd=tmp_path)


class TestMachines:
    """Tests for machine handles and providers."""

    def test_machine_handle(self, project_dir):
        """machine() returns a handle carrying the machine's settings."""
        env = Environment(cwd=project_dir)
        machine = env.machine("web1", "docker")
        assert machine == MachineHandle("web1", "docker")
        assert machine.settings["box"] == "ubuntu/jammy64"

    def test_unknown_machine(self, project_dir):
        """machine() returns None for unconfigured names."""
        assert Environment(cwd=project_dir).machine("nope", "docker") is None

    def test_default_provider_from_machinefile(self, project_dir):
        """The project [defaults] provider is the default provider."""
        assert Environment(cwd=project_dir).default_provider() == "docker"

    def test_primary_machine(self, project_dir):
        """The machine flagged primary is returned with the default provider."""
        env = Environment(cwd=project_dir)
        assert env.primary_machine(None) == MachineHandle("web1", "docker")
        assert env.primary_machine("aws") == MachineHandle("web1", "aws")

    def test_primary_machine_uses_active_provider(self, project_dir):
        """Without a requested provider the primary keeps its active provider."""
        env = Environment(cwd=project_dir)
        env.activate("web1", "libvirt")
        assert env.primary_machine(None) == MachineHandle("web1", "libvirt")

    def test_single_machine_is_primary(self, tmp_path):
        """With exactly one machine it is the primary machine."""
        (tmp_path / ".git").mkdir()
        (tmp_path / "Machinefile.toml").write_text("[machines.only]\n")
        env = Environment(cwd=tmp_path)
        assert env.primary_machine(None) == MachineHandle("only", "virtualbox")

    def test_no_primary(self, tmp_path):
        """Several machines and no primary flag means no primary machine."""
        (tmp_path / ".git").mkdir()
        (tmp_path / "Machinefile.toml").write_text("[machines.a]\n[machines.b]\n")
        assert Environment(cwd=tmp_path).primary_machine(None) is None


class TestActiveState:
    """Tests for the active machine state file."""

    def test_activate_and_read(self, project_dir):
        """Activated machines are persisted in order."""
        env = Environment(cwd=project_dir)
        env.activate("db", "docker")
        env.activate("web1", "libvirt")

        assert Environment(cwd=project_dir).active_machines() == [
            ActiveMachine("db", "docker"),
            ActiveMachine("web1", "libvirt"),
        ]
        data = json.loads(env.state_file.read_text())
        assert data == [
            {"name": "db", "provider": "docker"},
            {"name": "web1", "provider": "libvirt"},
        ]

    def test_activate_twice_same_provider(self, project_dir):
        """Activating an active machine again is a no-op."""
        env = Environment(cwd=project_dir)
        env.activate("db", "docker")
        env.activate("db", "docker")
        assert env.active_machines() == [ActiveMachine("db", "docker")]

    def test_is_active(self, project_dir):
        """A machine is active only with the provider it was brought up with."""
        env = Environment(cwd=project_dir)
        env.activate("db", "docker")

        assert env.is_active(MachineHandle("db", "docker"))
        assert not env.is_active(MachineHandle("db", "virtualbox"))
        assert not env.is_active(MachineHandle("web1", "docker"))

    def test_activate_other_provider(self, project_dir):
        """One provider per active machine."""
        env = Environment(cwd=project_dir)
        env.activate("db", "docker")
        with pytest.raises(ActiveMachineProviderConflict):
            env.activate("db", "virtualbox")

    def test_deactivate(self, project_dir):
        """deactivate() reports whether the machine was active."""
        env = Environment(cwd=project_dir)
        env.activate("db", "docker")
        assert env.deactivate("db") is True
        assert env.deactivate("db") is False
        assert env.active_machines() == []

    def test_without_project(self, tmp_path):
        """State changes need a project."""
        (tmp_path / ".git").mkdir()
        env = Environment(cwd=tmp_path)
        with pytest.raises(EnvironmentNotInitialized):
            env.activate("db", "docker")
        with pytest.raises(EnvironmentNotInitialized):
            env.deactivate("db")

    def test_corrupt_state(self, project_dir):
        """A corrupt state file is a configuration error."""
        env = Environment(cwd=project_dir)
        env.state_file.parent.mkdir()
        env.state_file.write_text("{not json")
        with pytest.raises(ConfigurationError, match="corrupt"):
            env.active_machines()

    def test_invalid_entry(self, project_dir):
        """State entries need a name and a provider."""
        env = Environment(cwd=project_dir)
        env.state_file.parent.mkdir()
        env.state_file.write_text('[{"name": "db"}]')
        with pytest.raises(ConfigurationError, match="Invalid active machine entry"):
            env.active_machines()


class TestResolveWithEnvironment:
    """resolve_targets against a real project."""

    def test_active_provider_used(self, project_dir):
        """Active machines keep their provider, others get the default."""
        env = Environment(cwd=project_dir)
        env.activate("web2", "libvirt")

        machines = resolve_targets(["/^web/"], ResolutionOptions(), env)
        assert [(m.name, m.provider) for m in machines] == [
            ("web1", "docker"),
            ("web2", "libvirt"),
        ]

    def test_no_project(self, tmp_path):
        """Resolution without a project fails."""
        (tmp_path / ".git").mkdir()
        with pytest.raises(EnvironmentNotInitialized):
            resolve_targets([], ResolutionOptions(), Environment(cwd=tmp_path))
