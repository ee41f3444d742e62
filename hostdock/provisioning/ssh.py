"""SSH connectivity gate, run before any remote mutation."""

import logging

from hostdock.errors import ConnectivityError
from hostdock.provisioning.shell import run_shell_cmd
from hostdock.provisioning.ssh_transport import ssh_base_args

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT = 10


async def check_ssh(target, dry_run=False, timeout=CONNECT_TIMEOUT):
    """Round-trip ``echo connected`` to the target.

    Raises:
        ConnectivityError: on timeout, auth failure or unexpected output.
    """
    args = ssh_base_args(target.address, target.ssh_key, target.ssh_port)
    # Add ConnectTimeout for fast failure
    args.insert(-1, "-o")
    args.insert(-1, f"ConnectTimeout={timeout}")
    args.append("echo connected")

    logger.info("Checking SSH connection...")
    # Allow a little slack over ConnectTimeout for the round-trip itself
    rc, stdout, stderr = await run_shell_cmd(args, dry_run=dry_run, timeout=timeout + 5)
    if dry_run:
        return
    if rc != 0 or "connected" not in stdout:
        raise ConnectivityError(
            f"SSH connection to {target.address} failed",
            context=stderr.strip() or None,
        )
    logger.info(f"Connected to {target.address}.")
