"""Unit tests for SSH/SCP argument building and the run_cmd/write_file closures."""

import logging
import shlex
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from hostdock.errors import ConnectivityError
from hostdock.provisioning.ssh import check_ssh
from hostdock.provisioning.ssh_transport import (
    make_run_cmd,
    make_write_file,
    remote_command,
    ssh_base_args,
    ssh_shell_string,
)
from hostdock.provisioning.types import SSHTarget

TARGET = SSHTarget(host="203.0.113.10", username="ubuntu", ssh_key="/keys/id", ssh_port=22)


def _fake_proc(returncode=0, stdout=b"", stderr=b""):
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    return proc


# ── argument building ───────────────────────────────────────────


def test_ssh_base_args_default_port():
    args = ssh_base_args("ubuntu@h", "/keys/id", 22)
    assert args[0] == "ssh"
    assert args[-1] == "ubuntu@h"
    assert "BatchMode=yes" in args
    assert ["-i", "/keys/id"] == args[args.index("-i"):args.index("-i") + 2]
    assert "-p" not in args


def test_ssh_base_args_custom_port_no_key():
    args = ssh_base_args("h", "", 2222)
    assert "-i" not in args
    assert args[args.index("-p") + 1] == "2222"


def test_ssh_shell_string_for_rsync():
    shell = ssh_shell_string("/keys/my key", 2200)
    assert shell.startswith("ssh -o StrictHostKeyChecking=no")
    assert "'/keys/my key'" in shell
    assert shell.endswith("-p 2200")


def test_remote_command_quotes_whole_script():
    wrapped = remote_command("echo $HOME && ls", cwd="~/app_deploy")
    assert wrapped.startswith("bash -c ")
    assert shlex.split(wrapped) == ["bash", "-c", "cd ~/app_deploy && echo $HOME && ls"]


# ── run_cmd ─────────────────────────────────────────────────────


async def test_run_cmd_dry_run_logs_and_succeeds(caplog):
    run_cmd = make_run_cmd(TARGET, dry_run=True)
    with caplog.at_level(logging.INFO):
        rc, out, err = await run_cmd("sudo docker ps", cwd="~/app_deploy")
    assert (rc, out, err) == (0, "", "")
    assert "[dry-run] ssh ubuntu@203.0.113.10: cd ~/app_deploy && sudo docker ps" in caplog.text


async def test_run_cmd_executes_over_ssh():
    proc = _fake_proc(0, b"hello\n", b"")
    with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as spawn:
        rc, out, _ = await make_run_cmd(TARGET)("echo hello", stream=False)

    assert rc == 0
    assert out == "hello\n"
    argv = spawn.call_args[0]
    assert argv[0] == "ssh"
    assert argv[-2] == "ubuntu@203.0.113.10"
    assert argv[-1] == "bash -c 'echo hello'"


async def test_run_cmd_ssh_missing_returns_failure():
    with patch("asyncio.create_subprocess_exec", AsyncMock(side_effect=FileNotFoundError("ssh"))):
        rc, _, _ = await make_run_cmd(TARGET)("true", stream=False)
    assert rc == 1


# ── write_file ──────────────────────────────────────────────────


async def test_write_file_dry_run(caplog):
    write_file = make_write_file(TARGET, dry_run=True)
    with caplog.at_level(logging.INFO):
        ok = await write_file("/etc/nginx/conf.d/app.conf", "server {}")
    assert ok
    assert "[dry-run] scp app.conf -> ubuntu@203.0.113.10:/etc/nginx/conf.d/app.conf" in caplog.text


async def test_write_file_scp_then_sudo_install():
    procs = [_fake_proc(0), _fake_proc(0)]
    with patch("asyncio.create_subprocess_exec", AsyncMock(side_effect=procs)) as spawn:
        ok = await make_write_file(TARGET)("/etc/nginx/conf.d/app.conf", "server {}")

    assert ok
    scp_argv = spawn.call_args_list[0][0]
    assert scp_argv[0] == "scp"
    assert scp_argv[-1] == "ubuntu@203.0.113.10:/tmp/hostdock-app.conf"
    install_argv = spawn.call_args_list[1][0]
    assert "sudo install -D -m 644 /tmp/hostdock-app.conf /etc/nginx/conf.d/app.conf" in install_argv[-1]


async def test_write_file_scp_failure():
    with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=_fake_proc(1, b"", b"denied"))) as spawn:
        ok = await make_write_file(TARGET)("/etc/x.conf", "x")
    assert not ok
    assert spawn.call_count == 1


# ── check_ssh ───────────────────────────────────────────────────


async def test_check_ssh_success():
    proc = _fake_proc(0, b"connected\n")
    with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)) as spawn:
        await check_ssh(TARGET)
    argv = spawn.call_args[0]
    assert "ConnectTimeout=10" in argv
    assert argv[-2:] == ("ubuntu@203.0.113.10", "echo connected")


async def test_check_ssh_unreachable_raises():
    proc = _fake_proc(255, b"", b"ssh: connect to host 203.0.113.10 port 22: Connection timed out")
    with patch("asyncio.create_subprocess_exec", AsyncMock(return_value=proc)):
        with pytest.raises(ConnectivityError, match="SSH connection to ubuntu@203.0.113.10 failed"):
            await check_ssh(TARGET)


async def test_check_ssh_dry_run_spawns_nothing():
    with patch("asyncio.create_subprocess_exec", AsyncMock()) as spawn:
        await check_ssh(TARGET, dry_run=True)
    spawn.assert_not_called()
