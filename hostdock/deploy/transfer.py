"""Artifact transfer: mirror the working copy into the remote deploy directory."""

import logging

from hostdock.errors import TransferError
from hostdock.provisioning.shell import run_shell_cmd
from hostdock.provisioning.ssh_transport import ssh_shell_string

logger = logging.getLogger(__name__)

RSYNC_EXCLUDES = (".git",)


def build_rsync_cmd(local_path, target, remote_dir, mirror_deletions=False):
    """rsync argv for a delta copy of local_path's contents into remote_dir."""
    cmd = ["rsync", "-az"]
    if mirror_deletions:
        cmd.append("--delete")
    for pattern in RSYNC_EXCLUDES:
        cmd += ["--exclude", pattern]
    cmd += ["-e", ssh_shell_string(target.ssh_key, target.ssh_port)]
    # Trailing slashes copy the directory's contents, not the directory itself
    cmd += [f"{local_path.rstrip('/')}/", f"{target.address}:{remote_dir.rstrip('/')}/"]
    return cmd


async def transfer_repository(run_cmd, staged, config):
    """Ensure remote_dir exists, then rsync the working copy into it.

    Files deleted locally stay on the remote host unless mirror_deletions is set.

    Raises:
        TransferError: mkdir or rsync failed.
    """
    logger.info("Transferring project files...")
    rc, _, _ = await run_cmd(f"mkdir -p {config.remote_dir}", timeout=60, log_output=True)
    if rc != 0:
        raise TransferError(f"Could not create {config.remote_dir} on {config.address}")

    cmd = build_rsync_cmd(staged.path, config.target, config.remote_dir, config.mirror_deletions)
    rc, _, stderr = await run_shell_cmd(cmd, dry_run=config.dry_run, timeout=1800, log_output=True)
    if rc != 0:
        raise TransferError(f"rsync to {config.address} failed (exit {rc})", context=stderr.strip() or None)
    logger.info("Project files synced.")
