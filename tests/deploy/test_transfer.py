"""Unit tests for artifact transfer via rsync."""

from unittest.mock import AsyncMock, patch

import pytest

from hostdock.deploy.stage import StagedRepo
from hostdock.deploy.transfer import build_rsync_cmd, transfer_repository
from hostdock.errors import TransferError
from hostdock.provisioning.types import SSHTarget


def test_build_rsync_cmd_excludes_git_and_keeps_deletions():
    cmd = build_rsync_cmd("/ws/demo-app", SSHTarget("h", "ubuntu", "/keys/id"), "~/app_deploy")
    assert cmd[:2] == ["rsync", "-az"]
    assert "--delete" not in cmd
    assert cmd[cmd.index("--exclude") + 1] == ".git"
    assert cmd[cmd.index("-e") + 1].startswith("ssh ")
    assert cmd[-2:] == ["/ws/demo-app/", "ubuntu@h:~/app_deploy/"]


def test_build_rsync_cmd_mirror_deletions():
    cmd = build_rsync_cmd("/ws/demo-app/", SSHTarget("h"), "/srv/app/", mirror_deletions=True)
    assert "--delete" in cmd
    assert cmd[-2:] == ["/ws/demo-app/", "h:/srv/app/"]


async def test_transfer_creates_remote_dir_first(fake_remote, make_config):
    remote = fake_remote()
    config = make_config()
    rsync = AsyncMock(return_value=(0, "", ""))
    with patch("hostdock.deploy.transfer.run_shell_cmd", rsync):
        await transfer_repository(remote.run_cmd, StagedRepo(config.local_path, "demo-app"), config)

    assert remote.commands == ["mkdir -p ~/app_deploy"]
    assert rsync.call_args.args[0][0] == "rsync"


async def test_transfer_rsync_failure(fake_remote, make_config):
    remote = fake_remote()
    config = make_config()
    with patch("hostdock.deploy.transfer.run_shell_cmd", AsyncMock(return_value=(23, "", "partial transfer"))):
        with pytest.raises(TransferError, match="rsync"):
            await transfer_repository(remote.run_cmd, StagedRepo(config.local_path, "demo-app"), config)


async def test_transfer_mkdir_failure(fake_remote, make_config):
    remote = fake_remote({"mkdir": (1, "", "")})
    config = make_config()
    with pytest.raises(TransferError, match="Could not create"):
        await transfer_repository(remote.run_cmd, StagedRepo(config.local_path, "demo-app"), config)
