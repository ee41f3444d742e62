"""Shared pytest fixtures for all test modules."""

import os
import subprocess
import sys

import pytest

import hostdock.redact as redact_module
from hostdock.config.params import DeploymentConfig

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))

BARE_HOST_STATE = """\
package_manager=apt-get
has_docker=0
compose_command=
has_nginx=0
container_exists=0
port_80_in_use=0
"""

READY_HOST_STATE = """\
package_manager=apt-get
has_docker=1
compose_command=docker compose
has_nginx=1
container_exists=1
port_80_in_use=1
"""


class FakeRemote:
    """Stands in for make_run_cmd / make_write_file and records every call.

    ``responses`` maps a substring of the command to a result tuple, or to a
    list of tuples consumed in order (the last one repeats). The first
    matching substring wins; unmatched commands succeed with no output.
    """

    def __init__(self, responses=None, write_ok=True):
        self.responses = dict(responses or {})
        self.commands = []
        self.files = {}
        self.write_ok = write_ok

    async def run_cmd(self, command, stream=True, timeout=600, log_output=False, cwd=None):
        self.commands.append(f"cd {cwd} && {command}" if cwd else command)
        for needle, result in self.responses.items():
            if needle in command:
                if isinstance(result, list):
                    return result.pop(0) if len(result) > 1 else result[0]
                return result
        return 0, "", ""

    async def write_file(self, remote_path, content, mode="644"):
        self.files[remote_path] = content
        return self.write_ok

    def ran(self, needle):
        return any(needle in c for c in self.commands)

    def index(self, needle):
        """Position of the first command containing needle."""
        for i, c in enumerate(self.commands):
            if needle in c:
                return i
        raise AssertionError(f"no command containing {needle!r} in {self.commands}")


@pytest.fixture
def fake_remote():
    return FakeRemote


@pytest.fixture(autouse=True)
def _reset_redaction():
    """Keep registered secrets from leaking between tests."""
    redact_module.clear_registered_secrets()
    yield
    redact_module.clear_registered_secrets()


@pytest.fixture
def workspace(tmp_path):
    """A staging workspace holding an already-cloned 'demo-app' with a Dockerfile."""
    repo = tmp_path / "workspace" / "demo-app"
    (repo / ".git").mkdir(parents=True)
    (repo / "Dockerfile").write_text("FROM node:18-alpine\nEXPOSE 3000\n")
    return str(tmp_path / "workspace")


@pytest.fixture
def make_config(workspace):
    """Return a factory for DeploymentConfig with test defaults."""

    def _make(**overrides):
        values = {
            "repo_url": "https://github.com/example/demo-app.git",
            "server": "203.0.113.10",
            "app_port": 3000,
            "access_token": "ghp_TestToken1234567890",
            "ssh_user": "ubuntu",
            "ssh_key": "/home/me/.ssh/id_ed25519",
            "workspace": workspace,
        }
        values.update(overrides)
        return DeploymentConfig(**values)

    return _make


@pytest.fixture(scope="session")
def run_cli():
    """Return a callable that invokes the hostdock CLI as a subprocess."""

    def _run(*args, cwd=None, env=None):
        result = subprocess.run(
            [sys.executable, "-m", "hostdock.hostdock", *args],
            capture_output=True,
            text=True,
            cwd=cwd or PROJECT_ROOT,
            env={**os.environ, "PYTHONPATH": PROJECT_ROOT, **(env or {})},
            stdin=subprocess.DEVNULL,
        )
        return result.returncode, result.stdout, result.stderr

    return _run


@pytest.fixture
def bare_host_state():
    """Probe output for a fresh Debian-like host."""
    return BARE_HOST_STATE


@pytest.fixture
def ready_host_state():
    """Probe output for a host that already ran one deploy."""
    return READY_HOST_STATE
