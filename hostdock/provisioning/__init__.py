"""Host provisioning: types, SSH transport, shell helpers, state probe, bootstrap."""

from hostdock.provisioning.remote import bootstrap_remote
from hostdock.provisioning.shell import run_shell_cmd
from hostdock.provisioning.ssh import check_ssh
from hostdock.provisioning.ssh_transport import (
    REMOTE_DEPLOY_DIR,
    make_run_cmd,
    make_write_file,
    scp_file,
    ssh_base_args,
)
from hostdock.provisioning.state import RemoteEnvironmentState, probe_remote_state
from hostdock.provisioning.types import SSHTarget

__all__ = [
    "SSHTarget",
    "RemoteEnvironmentState",
    "probe_remote_state",
    "check_ssh",
    "run_shell_cmd",
    "bootstrap_remote",
    "ssh_base_args",
    "make_run_cmd",
    "make_write_file",
    "scp_file",
    "REMOTE_DEPLOY_DIR",
]
