"""SSH transport: run commands and write files on the deploy host via SSH/SCP."""

import asyncio
import logging
import os
import shlex
import tempfile

logger = logging.getLogger(__name__)

REMOTE_DEPLOY_DIR = "~/app_deploy"

_COMMON_OPTS = [
    "-o", "StrictHostKeyChecking=no",
    "-o", "UserKnownHostsFile=/dev/null",
    "-o", "BatchMode=yes",
    "-o", "ServerAliveInterval=60",
    "-o", "ServerAliveCountMax=5",
]


def ssh_options(ssh_key, ssh_port):
    """SSH options shared by ssh and rsync's remote shell."""
    args = list(_COMMON_OPTS)
    if ssh_key:
        args += ["-i", os.path.expanduser(ssh_key)]
    if ssh_port and ssh_port != 22:
        args += ["-p", str(ssh_port)]
    return args


def ssh_base_args(server, ssh_key, ssh_port):
    """Build base SSH arguments."""
    return ["ssh", *ssh_options(ssh_key, ssh_port), server]


def ssh_shell_string(ssh_key, ssh_port):
    """SSH invocation as one string, for rsync -e."""
    return " ".join(shlex.quote(a) for a in ["ssh", *ssh_options(ssh_key, ssh_port)])


def remote_command(command, cwd=None):
    """Wrap a (possibly multi-line) script so the remote side runs it in bash."""
    script = f"cd {cwd} && {command}" if cwd else command
    return f"bash -c {shlex.quote(script)}"


def make_run_cmd(target, dry_run=False):
    """Create a run_cmd callable for SSH execution against an SSHTarget."""
    server = target.address

    async def run_cmd(command, stream=True, timeout=600, log_output=False, cwd=None):
        if dry_run:
            shown = f"cd {cwd} && {command}" if cwd else command
            logger.info(f"[dry-run] ssh {server}: {shown}")
            return 0, "", ""

        ssh_args = ssh_base_args(server, target.ssh_key, target.ssh_port)
        ssh_args.append(remote_command(command, cwd=cwd))

        try:
            use_pipe = not stream or log_output
            proc = await asyncio.create_subprocess_exec(
                *ssh_args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE if use_pipe else None,
                stderr=asyncio.subprocess.PIPE if use_pipe else None,
            )

            if log_output:
                stdout_lines, stderr_lines = [], []

                async def _read_stream(pipe, lines, level):
                    async for raw_line in pipe:
                        line = raw_line.decode(errors="replace").rstrip("\n")
                        logger.log(level, line)
                        lines.append(line)

                await asyncio.wait_for(
                    asyncio.gather(
                        _read_stream(proc.stdout, stdout_lines, logging.INFO),
                        _read_stream(proc.stderr, stderr_lines, logging.ERROR),
                        proc.wait(),
                    ),
                    timeout=timeout,
                )
                return proc.returncode, "\n".join(stdout_lines), "\n".join(stderr_lines)
            else:
                stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout)
                stdout = "" if stream else (stdout_bytes.decode(errors="replace") if stdout_bytes else "")
                stderr = "" if stream else (stderr_bytes.decode(errors="replace") if stderr_bytes else "")
                return proc.returncode, stdout, stderr
        except TimeoutError:
            logger.error(f"Command timed out after {timeout}s: {command}")
            proc.kill()
            await proc.wait()
            return 1, "", ""
        except OSError as e:
            logger.error(f"Error running SSH command: {e}")
            return 1, "", str(e)

    return run_cmd


async def scp_file(local_path, server, ssh_key, ssh_port, remote_path, timeout=300):
    """Copy a file to the remote server via SCP."""
    scp_args = ["scp", *_COMMON_OPTS]
    if ssh_key:
        scp_args += ["-i", os.path.expanduser(ssh_key)]
    if ssh_port and ssh_port != 22:
        scp_args += ["-P", str(ssh_port)]
    scp_args += [local_path, f"{server}:{remote_path}"]

    try:
        proc = await asyncio.create_subprocess_exec(
            *scp_args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        stderr = stderr_bytes.decode(errors="replace") if stderr_bytes else ""
        return proc.returncode, stderr
    except TimeoutError:
        logger.error(f"SCP timed out after {timeout}s: {local_path} -> {server}:{remote_path}")
        proc.kill()
        await proc.wait()
        return 1, "timeout"


def make_write_file(target, dry_run=False):
    """Create a write_file callable that places a file on the remote host.

    The content goes to a temp path over SCP and is then moved into place
    with ``sudo install`` so root-owned destinations work.
    """
    server = target.address
    run_cmd = make_run_cmd(target, dry_run=dry_run)

    async def write_file(remote_path, content, mode="644"):
        staging_path = f"/tmp/hostdock-{os.path.basename(remote_path)}"
        if dry_run:
            logger.info(f"[dry-run] scp {os.path.basename(remote_path)} -> {server}:{remote_path}")
            return True

        # Write to a temp file locally, then SCP
        with tempfile.NamedTemporaryFile(mode="w", suffix=f"_{os.path.basename(remote_path)}", delete=False) as f:
            f.write(content)
            tmp_path = f.name

        try:
            rc, stderr = await scp_file(tmp_path, server, target.ssh_key, target.ssh_port, staging_path)
            if rc != 0:
                logger.error(f"Failed to SCP {remote_path} to {server}: {stderr}")
                return False
        finally:
            os.unlink(tmp_path)

        rc, _, _ = await run_cmd(
            f"sudo install -D -m {mode} {staging_path} {remote_path} && rm -f {staging_path}",
            stream=False,
        )
        if rc != 0:
            logger.error(f"Failed to install {remote_path} on {server}")
        return rc == 0

    return write_file
