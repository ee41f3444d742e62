"""Remote cleanup: return the host to a known-safe state."""

import logging

from hostdock.config.params import DEFAULT_PROXY_CONF
from hostdock.provisioning.ssh_transport import REMOTE_DEPLOY_DIR

logger = logging.getLogger(__name__)


def cleanup_script(remote_dir=REMOTE_DEPLOY_DIR, proxy_conf=DEFAULT_PROXY_CONF):
    """Every line tolerates an already-clean host."""
    return (
        "sudo docker ps -q 2>/dev/null | xargs -r sudo docker stop || true\n"
        "sudo docker container prune -f 2>/dev/null || true\n"
        "sudo docker network prune -f 2>/dev/null || true\n"
        f"sudo rm -rf {remote_dir}\n"
        f"sudo rm -f {proxy_conf}\n"
        "(sudo nginx -t && sudo systemctl reload nginx) 2>/dev/null || true"
    )


async def run_cleanup(run_cmd, remote_dir=REMOTE_DEPLOY_DIR, proxy_conf=DEFAULT_PROXY_CONF):
    """Stop containers, prune, remove deploy dir and proxy config, reload nginx.

    Never raises on remote failures. Returns True when the script ran cleanly.
    """
    logger.info("Performing remote cleanup...")
    rc, _, _ = await run_cmd(cleanup_script(remote_dir, proxy_conf), timeout=300, log_output=True)
    if rc == 0:
        logger.info("Cleanup completed (safe state restored).")
    else:
        logger.error(f"Cleanup failed (exit {rc}).")
    return rc == 0
